"""
FastAPI app for the hero composite flow:
phone OTP -> photo capture (client) -> server composite -> public JPEG URL.
"""
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from fastapi.staticfiles import StaticFiles

from compositor import CompositeError, Compositor, InvalidInput, PlacementParams
from config import (
    APP_URL,
    FRONTEND_ORIGIN,
    MAX_PHOTO_BYTES,
    OUTPUT_MAX_AGE_SECONDS,
    OUTPUT_SWEEP_INTERVAL_SECONDS,
    PORT,
    PUBLIC_BASE_URL,
)
from data_urls import decode_data_url
from hero_asset import HeroAsset
from qr_codes import render_qr_png
from schemas import CompositeRequest, SendOtpRequest, VerifyOtpRequest
from storage_client import FILES_ROUTE, LocalStorage, OutputSweeper, public_url
from verify_client import APPROVED, TwilioVerifyClient, VerificationError

OTP_ROUTES = ("/send-otp", "/verify-otp")


def create_app(
    storage: Optional[LocalStorage] = None,
    compositor: Optional[Compositor] = None,
    verifier=None,
    *,
    public_base_url: Optional[str] = PUBLIC_BASE_URL,
    app_url: str = APP_URL,
    max_photo_bytes: int = MAX_PHOTO_BYTES,
    output_max_age_seconds: int = OUTPUT_MAX_AGE_SECONDS,
) -> FastAPI:
    storage = storage or LocalStorage()
    compositor = compositor or Compositor(hero_asset=HeroAsset(), storage=storage)
    verifier = verifier or TwilioVerifyClient()

    app = FastAPI(title="Hero Composite API", version="1.0.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[FRONTEND_ORIGIN],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Serve generated files
    app.mount(FILES_ROUTE, StaticFiles(directory=str(storage.files_dir)), name="files")

    sweeper: Optional[OutputSweeper] = None

    @app.on_event("startup")
    async def startup_event():
        nonlocal sweeper
        if output_max_age_seconds > 0:
            sweeper = OutputSweeper(
                storage,
                max_age_seconds=output_max_age_seconds,
                interval_seconds=OUTPUT_SWEEP_INTERVAL_SECONDS,
            )
            sweeper.start()
            print(f"[server] Expiring composites after {output_max_age_seconds}s")

    @app.on_event("shutdown")
    async def shutdown_event():
        if sweeper:
            sweeper.stop()

    # ============================================================
    # ERROR MAPPING
    # ============================================================

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        first = exc.errors()[0] if exc.errors() else {}
        where = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = first.get("msg", "invalid request")
        body = {"error": f"{where}: {message}" if where else message}
        if request.url.path in OTP_ROUTES:
            body = {"success": False, **body}
        return JSONResponse(body, status_code=400)

    @app.exception_handler(InvalidInput)
    async def invalid_input(request: Request, exc: InvalidInput):
        print(f"[composite] Rejected: {exc}")
        return JSONResponse({"error": str(exc)}, status_code=400)

    @app.exception_handler(CompositeError)
    async def composite_failed(request: Request, exc: CompositeError):
        print(f"[composite] Failed: {exc}")
        return JSONResponse({"error": str(exc)}, status_code=500)

    @app.exception_handler(VerificationError)
    async def verification_failed(request: Request, exc: VerificationError):
        print(f"[otp] Provider error: {exc}")
        status = exc.status_code if exc.status_code and exc.status_code >= 400 else 500
        return JSONResponse({"success": False, "error": str(exc)}, status_code=status)

    # ============================================================
    # ROUTES
    # ============================================================

    @app.get("/", response_class=PlainTextResponse)
    def health():
        return "API OK"

    @app.post("/send-otp")
    def send_otp(body: Optional[SendOtpRequest] = None):
        body = body or SendOtpRequest()
        if not body.phone:
            return JSONResponse({"success": False, "error": "phone required"}, status_code=400)

        verification = verifier.send(body.phone)
        print(f"[otp] Sent to {body.phone} status={verification.get('status')}")
        return {"success": True, "sid": verification.get("sid"), "status": verification.get("status")}

    @app.post("/verify-otp")
    def verify_otp(body: Optional[VerifyOtpRequest] = None):
        body = body or VerifyOtpRequest()
        if not body.phone or not body.code:
            return JSONResponse(
                {"success": False, "error": "phone and code required"}, status_code=400
            )

        check = verifier.check(body.phone, body.code)
        if check.get("status") == APPROVED:
            return {"success": True}
        return JSONResponse(
            {"success": False, "error": "incorrect code", "status": check.get("status")},
            status_code=400,
        )

    @app.post("/composite")
    def composite(request: Request, body: Optional[CompositeRequest] = None):
        # Plain def: FastAPI runs it in the threadpool, keeping Pillow work
        # off the event loop.
        body = body or CompositeRequest()
        if not body.photo:
            raise InvalidInput("photo (data URL) is required")

        _, photo_bytes = decode_data_url(body.photo)
        if len(photo_bytes) > max_photo_bytes:
            raise InvalidInput(f"photo exceeds {max_photo_bytes} bytes")

        params = PlacementParams.from_request(
            side=body.side,
            scale=body.scale,
            pos_x=body.pos_x,
            pos_y=body.pos_y,
            opacity=body.opacity,
        )
        result = compositor.compose(photo_bytes, params)

        base_url = public_base_url or str(request.base_url)
        return {"url": public_url(result.filename, base_url)}

    @app.get("/qr")
    def qr(url: Optional[str] = None):
        return Response(content=render_qr_png(url or app_url), media_type="image/png")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    print(f"[server] Listening on {PORT}")
    uvicorn.run(app, host="0.0.0.0", port=PORT)
