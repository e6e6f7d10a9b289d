import base64
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse, Response
from fastapi.templating import Jinja2Templates

from config import Settings, get_settings
from dependencies import (
    get_auth_client,
    get_session_guard,
    get_signup_orchestrator,
    get_submissions,
)
from models.auth import AuthSession
from models.forms import DuplicateSubmission, FormState, FormStatus
from services.auth_client import AuthClient
from services.errors import FormValidationError, PortalError
from services.session_guard import SessionGuard
from services.signup import SignupOrchestrator
from services.submissions import SubmissionRegistry, new_form_id
from services.validation import validate_login

logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
router = APIRouter(tags=["Pages"])

WELCOME_BACK = "Welcome back!"
ACCOUNT_CREATED = "Account created successfully!"
SIGN_OUT_FAILED = "Error signing out"
ALREADY_SUBMITTING = "Your previous request is still being processed."

LOGIN_FIELDS = ("email", "remember_me")
SIGNUP_FIELDS = ("email", "username", "full_name", "terms_accepted")


# ========================================
# Cookies
# ========================================

def _read_flashes(request: Request, settings: Settings) -> List[Dict[str, str]]:
    raw = request.cookies.get(settings.flash_cookie_name)
    if not raw:
        return []
    try:
        flashes = json.loads(base64.urlsafe_b64decode(raw.encode()).decode())
    except ValueError:
        logger.debug("Ignoring malformed flash cookie")
        return []

    # The cookie is client-controlled: keep only well-formed entries
    if not isinstance(flashes, list):
        logger.debug("Ignoring flash cookie that is not a list")
        return []
    return [
        {"level": str(item["level"]), "message": str(item["message"])}
        for item in flashes
        if isinstance(item, dict) and "level" in item and "message" in item
    ]


def _flash(response: Response, settings: Settings, level: str, message: str) -> Response:
    payload = json.dumps([{"level": level, "message": message}])
    response.set_cookie(
        settings.flash_cookie_name,
        base64.urlsafe_b64encode(payload.encode()).decode(),
        max_age=60,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )
    return response


def _set_session_cookies(
    response: Response, settings: Settings, session: AuthSession, remember: bool
) -> None:
    # Only remembered sessions keep a refresh token, as persistent cookies
    max_age = settings.remember_me_max_age if remember else None
    response.set_cookie(
        settings.access_cookie_name,
        session.access_token,
        max_age=max_age,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )
    if remember and session.refresh_token:
        response.set_cookie(
            settings.refresh_cookie_name,
            session.refresh_token,
            max_age=max_age,
            httponly=True,
            secure=settings.cookie_secure,
            samesite="lax",
        )
    else:
        response.delete_cookie(settings.refresh_cookie_name)


def _clear_session_cookies(response: Response, settings: Settings) -> None:
    response.delete_cookie(settings.access_cookie_name)
    response.delete_cookie(settings.refresh_cookie_name)


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=status.HTTP_303_SEE_OTHER)


# ========================================
# Rendering
# ========================================

def _render(
    request: Request,
    settings: Settings,
    name: str,
    context: Dict[str, Any],
    notifications: Optional[List[Dict[str, str]]] = None,
    status_code: int = status.HTTP_200_OK,
) -> Response:
    flashes = _read_flashes(request, settings)
    context = {
        "form": FormState(),
        "values": {},
        "form_id": new_form_id(),
        **context,
        "notifications": flashes + (notifications or []),
    }
    response = templates.TemplateResponse(request, name, context, status_code=status_code)
    if settings.flash_cookie_name in request.cookies:
        response.delete_cookie(settings.flash_cookie_name)
    return response


def _form_values(raw: Dict[str, Any], fields) -> Dict[str, Any]:
    # Passwords are never echoed back
    return {name: raw.get(name, "") for name in fields}


def _failure(form: FormState, error: PortalError) -> List[Dict[str, str]]:
    if isinstance(error, FormValidationError):
        form.fail(error.kind, field_errors=error.fields)
        return []
    form.fail(error.kind, error.message)
    return [{"level": "error", "message": error.message}]


# ========================================
# Login
# ========================================

@router.get("/login")
async def login_page(
    request: Request,
    auth: AuthClient = Depends(get_auth_client),
    settings: Settings = Depends(get_settings)
):
    if await auth.current_user(request.cookies.get(settings.access_cookie_name)):
        return _redirect("/")
    return _render(request, settings, "login.html", {})


@router.post("/login")
async def login_submit(
    request: Request,
    auth: AuthClient = Depends(get_auth_client),
    submissions: SubmissionRegistry = Depends(get_submissions),
    settings: Settings = Depends(get_settings)
):
    raw = dict(await request.form())
    form_id = raw.pop("form_id", None) or new_form_id()
    values = _form_values(raw, LOGIN_FIELDS)

    try:
        async with submissions.claim(form_id) as form:
            try:
                credentials = validate_login(raw)
                session = await auth.sign_in(credentials.email, credentials.password)
            except PortalError as e:
                notifications = _failure(form, e)
                return _render(
                    request, settings, "login.html",
                    {"form": form, "values": values, "form_id": form_id},
                    notifications, status_code=e.status_code,
                )
            form.succeed()
    except DuplicateSubmission:
        return _render(
            request, settings, "login.html",
            {"form": FormState(status=FormStatus.SUBMITTING), "values": values, "form_id": form_id},
            [{"level": "error", "message": ALREADY_SUBMITTING}],
            status_code=status.HTTP_409_CONFLICT,
        )

    response = _redirect("/")
    _set_session_cookies(response, settings, session, credentials.remember_me)
    return _flash(response, settings, "success", WELCOME_BACK)


# ========================================
# Signup
# ========================================

@router.get("/signup")
async def signup_page(
    request: Request,
    auth: AuthClient = Depends(get_auth_client),
    settings: Settings = Depends(get_settings)
):
    if await auth.current_user(request.cookies.get(settings.access_cookie_name)):
        return _redirect("/")
    return _render(request, settings, "signup.html", {})


@router.post("/signup")
async def signup_submit(
    request: Request,
    orchestrator: SignupOrchestrator = Depends(get_signup_orchestrator),
    submissions: SubmissionRegistry = Depends(get_submissions),
    settings: Settings = Depends(get_settings)
):
    raw = dict(await request.form())
    form_id = raw.pop("form_id", None) or new_form_id()
    values = _form_values(raw, SIGNUP_FIELDS)

    try:
        async with submissions.claim(form_id) as form:
            try:
                await orchestrator.sign_up(raw)
            except PortalError as e:
                notifications = _failure(form, e)
                return _render(
                    request, settings, "signup.html",
                    {"form": form, "values": values, "form_id": form_id},
                    notifications, status_code=e.status_code,
                )
            form.succeed()
    except DuplicateSubmission:
        return _render(
            request, settings, "signup.html",
            {"form": FormState(status=FormStatus.SUBMITTING), "values": values, "form_id": form_id},
            [{"level": "error", "message": ALREADY_SUBMITTING}],
            status_code=status.HTTP_409_CONFLICT,
        )

    response = _redirect("/login")
    return _flash(response, settings, "success", ACCOUNT_CREATED)


# ========================================
# Home (session-gated) and sign-out
# ========================================

@router.get("/")
async def home_page(
    request: Request,
    guard: SessionGuard = Depends(get_session_guard),
    settings: Settings = Depends(get_settings)
):
    decision = await guard.enter(
        request.cookies.get(settings.access_cookie_name),
        request.cookies.get(settings.refresh_cookie_name),
    )
    if not decision.allowed:
        response = _redirect(decision.redirect_to)
        _clear_session_cookies(response, settings)
        return response

    response = _render(
        request, settings, "home.html",
        {"identity": decision.identity, "profile": decision.profile},
        [{"level": "error", "message": message} for message in decision.notifications],
    )
    if decision.refreshed is not None:
        _set_session_cookies(response, settings, decision.refreshed, remember=True)
    return response


@router.post("/logout")
async def logout(
    request: Request,
    auth: AuthClient = Depends(get_auth_client),
    submissions: SubmissionRegistry = Depends(get_submissions),
    settings: Settings = Depends(get_settings)
):
    token = request.cookies.get(settings.access_cookie_name)
    form_id = (await request.form()).get("form_id")

    if not token:
        # Remembered session whose access cookie expired: revoke it too
        refreshed = await auth.refresh(request.cookies.get(settings.refresh_cookie_name))
        if refreshed is not None:
            token = refreshed.access_token

    if token:
        try:
            async with submissions.claim(form_id) as form:
                try:
                    await auth.sign_out(token)
                except PortalError as e:
                    form.fail(e.kind, e.message)
                    # Session cookies stay untouched
                    return _flash(_redirect("/"), settings, "error", SIGN_OUT_FAILED)
                form.succeed()
        except DuplicateSubmission:
            return _flash(_redirect("/"), settings, "error", ALREADY_SUBMITTING)

    response = _redirect("/login")
    _clear_session_cookies(response, settings)
    return response


@router.get("/{path:path}")
async def fallback(path: str):
    return _redirect("/login")
