import logging
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Optional

from fastapi import Body, Depends, FastAPI, HTTPException, Request
from fastapi.responses import (
    HTMLResponse,
    JSONResponse,
    RedirectResponse,
    Response,
)
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError
from sqlalchemy.orm import Session
from starlette.middleware.sessions import SessionMiddleware

from auth import AuthClient, AuthError, AuthSession, auth_events
from config import get_settings
from csrf import generate_csrf_token, validate_csrf_token
from database import session_scope
from demo_data import DEFAULT_CATEGORIES
from formatting import (
    format_amount_input,
    format_compact,
    format_currency,
    parse_amount,
)
from i18n import get_translations
from local_storage import DemoStore, new_client_id
from metrics import (
    active_categories,
    budget_progress,
    chart_points,
    daily_cash_flow,
    dashboard_stats,
    monthly_cash_flow,
    savings_status,
    top_spending_categories,
)
from models import CurrencyCode, Language, TransactionType
from onboarding import OnboardingWizard
from periods import (
    PERIOD_SLUGS,
    Period,
    filter_transactions,
    local_today,
    resolve_period,
)
from profile_context import ProfileContext, provide_profile, use_profile
from schemas import (
    BudgetProgress,
    DashboardStats,
    SessionInfo,
    TransactionIn,
    TransactionOut,
    UserProfile,
)
from services import FinanceService, NotAuthenticatedError

settings = get_settings()
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent

app = FastAPI(title="Personal Finance Tracker")
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.session_secret,
    session_cookie="finance_session",
    same_site="lax",
    max_age=settings.session_max_age_hours * 3600,
)
app.mount("/static", StaticFiles(directory=BASE_DIR / "static"), name="static")
templates = Jinja2Templates(directory=BASE_DIR / "templates")


def _load_app_version() -> str:
    try:
        import tomllib
    except ImportError:
        return "unknown"
    try:
        with open(BASE_DIR / "pyproject.toml", "rb") as f:
            data = tomllib.load(f)
        return str(data.get("project", {}).get("version", "unknown"))
    except (OSError, tomllib.TOMLDecodeError):
        return "unknown"


APP_VERSION = _load_app_version()


templates.env.filters["currency"] = format_currency
templates.env.filters["compact"] = format_compact
templates.env.filters["amount_input"] = format_amount_input
templates.env.globals["chart_points"] = chart_points
templates.env.globals["TransactionType"] = TransactionType
templates.env.globals["CurrencyCode"] = CurrencyCode
templates.env.globals["Language"] = Language
templates.env.globals["PERIOD_SLUGS"] = PERIOD_SLUGS
templates.env.globals["app_version"] = APP_VERSION


class LoginRequired(Exception):
    pass


@app.exception_handler(LoginRequired)
async def login_required_handler(request: Request, exc: LoginRequired):
    if request.url.path.startswith("/api/"):
        return JSONResponse({"detail": "Not authenticated"}, status_code=401)
    return RedirectResponse(url=request.app.url_path_for("landing"), status_code=303)


def _log_auth_event(event: str, auth_session: Optional[AuthSession]) -> None:
    user_id = auth_session.user_id if auth_session else None
    logger.info(f"auth_event: event={event} user_id={user_id}")


_auth_subscription = None


@app.on_event("startup")
def startup_event():
    global _auth_subscription
    _auth_subscription = auth_events.subscribe(_log_auth_event)


@app.on_event("shutdown")
def shutdown_event():
    if _auth_subscription is not None:
        _auth_subscription.unsubscribe()


# dependencies

demo_store = DemoStore(settings.demo_data_dir, latency_scale=settings.demo_latency_scale)


def get_db():
    with session_scope() as db:
        yield db


def get_demo_store() -> DemoStore:
    return demo_store


def client_id_for(request: Request) -> str:
    client_id = request.session.get("client_id")
    if not client_id:
        client_id = new_client_id()
        request.session["client_id"] = client_id
    return client_id


def get_auth_client(db: Session = Depends(get_db)) -> AuthClient:
    return AuthClient(db)


def get_finance_service(
    request: Request,
    db: Session = Depends(get_db),
    store: DemoStore = Depends(get_demo_store),
    auth_client: AuthClient = Depends(get_auth_client),
) -> FinanceService:
    storage = store.client(client_id_for(request))
    auth_session = auth_client.get_session(request.session.get("access_token"))
    if auth_session is None:
        request.session.pop("access_token", None)
    return FinanceService(store, storage, db, auth_session)


def require_access(
    service: FinanceService = Depends(get_finance_service),
) -> FinanceService:
    if service.auth_session is None and not service.is_demo_mode():
        raise LoginRequired()
    return service


def get_profile_context(
    request: Request, service: FinanceService = Depends(require_access)
) -> ProfileContext:
    context = provide_profile(request, service)
    if context.profile is None:
        raise HTTPException(status_code=503, detail="Profile unavailable")
    return context


def period_from_request(request: Request) -> Period:
    params = request.query_params
    try:
        return resolve_period(params.get("period"), params.get("start"), params.get("end"))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


async def check_form_csrf(request: Request):
    form = await request.form()
    if not validate_csrf_token(form.get("csrf_token", ""), client_id_for(request)):
        raise HTTPException(status_code=400, detail="Invalid CSRF token")
    return form


def check_header_csrf(request: Request) -> None:
    token = request.headers.get("X-CSRF-Token", "")
    if not validate_csrf_token(token, client_id_for(request)):
        raise HTTPException(status_code=400, detail="Invalid CSRF token")


def flash(request: Request, message: str) -> None:
    request.session["toast"] = message


def render(
    request: Request, template: str, context: dict[str, object], status_code: int = 200
) -> HTMLResponse:
    ctx: dict[str, object] = {
        "csrf_token": generate_csrf_token(client_id_for(request)),
        "toast": request.session.pop("toast", None),
    }
    profile_context = getattr(request.state, "profile_context", None)
    if profile_context is not None:
        profile = use_profile(request).profile
        ctx.update(
            {
                "profile": profile,
                "t": get_translations(profile.language if profile else None),
                "is_demo": profile_context.service.is_demo_mode(),
            }
        )
    ctx.update(context)
    return templates.TemplateResponse(request, template, ctx, status_code=status_code)


def redirect_to(request: Request, name: str, query: str = "") -> RedirectResponse:
    url = request.app.url_path_for(name)
    if query:
        url = f"{url}?{query}"
    return RedirectResponse(url=url, status_code=303)


# public pages


@app.get("/", response_class=HTMLResponse)
def landing(request: Request, service: FinanceService = Depends(get_finance_service)):
    if service.auth_session is not None or service.is_demo_mode():
        return redirect_to(request, "overview")
    lang = request.query_params.get("lang", "en")
    return render(request, "landing.html", {"t": get_translations(lang), "lang": lang})


@app.get("/auth", response_class=HTMLResponse)
def auth_page(request: Request):
    mode = "register" if request.query_params.get("mode") == "register" else "login"
    lang = request.query_params.get("lang", "id")
    return render(
        request,
        "auth.html",
        {"mode": mode, "lang": lang, "t": get_translations(lang), "error": None},
    )


@app.post("/auth")
async def authenticate(
    request: Request, auth_client: AuthClient = Depends(get_auth_client)
):
    form = await check_form_csrf(request)
    mode = "register" if form.get("mode") == "register" else "login"
    lang = form.get("lang", "id")
    email = str(form.get("email", ""))
    password = str(form.get("password", ""))
    try:
        if mode == "login":
            auth_session = auth_client.sign_in_with_password(email, password)
        else:
            auth_session = auth_client.sign_up(email, password)
    except ValidationError as exc:
        error = "; ".join(err["msg"] for err in exc.errors())
    except AuthError as exc:
        error = str(exc)
    else:
        request.session["access_token"] = auth_session.access_token
        return redirect_to(request, "overview")
    return render(
        request,
        "auth.html",
        {"mode": mode, "lang": lang, "t": get_translations(lang), "error": error},
        status_code=400,
    )


@app.post("/demo")
async def enter_demo(
    request: Request, service: FinanceService = Depends(get_finance_service)
):
    await check_form_csrf(request)
    service.enable_demo_mode()
    return redirect_to(request, "overview")


@app.post("/logout")
async def logout(
    request: Request,
    service: FinanceService = Depends(get_finance_service),
    auth_client: AuthClient = Depends(get_auth_client),
):
    await check_form_csrf(request)
    if service.is_demo_mode():
        service.disable_demo_mode()
    else:
        auth_client.sign_out(service.auth_session)
        service.clear_local_session()
        request.session.pop("access_token", None)
    request.session.pop("onboarding", None)
    return redirect_to(request, "landing")


# authenticated shell


@app.get("/app", response_class=HTMLResponse)
def overview(
    request: Request,
    context: ProfileContext = Depends(get_profile_context),
):
    service = context.service
    profile = context.profile
    if not profile.onboarding_completed and not service.is_demo_mode():
        return redirect_to(request, "onboarding_page")
    period = period_from_request(request)
    transactions = filter_transactions(service.get_transactions(), period)
    stats = dashboard_stats(transactions, profile.initial_balance)
    monthly = monthly_cash_flow(transactions)
    daily = daily_cash_flow(transactions, period)
    return render(
        request,
        "overview.html",
        {
            "active_view": "overview",
            "period": period,
            "stats": stats,
            "status": savings_status(stats),
            "monthly": monthly,
            "daily": daily,
            "top_categories": top_spending_categories(transactions),
            "recent": transactions[:5],
            "balance_input": format_amount_input(profile.initial_balance),
            "show_tour": not profile.tour_completed,
        },
    )


@app.get("/app/transactions", response_class=HTMLResponse)
def transactions_page(
    request: Request,
    context: ProfileContext = Depends(get_profile_context),
):
    service = context.service
    period = period_from_request(request)
    transactions = filter_transactions(service.get_transactions(), period)
    limits = service.get_budget_limits()
    return render(
        request,
        "transactions.html",
        {
            "active_view": "transactions",
            "period": period,
            "transactions": transactions,
            "categories": active_categories(limits),
            "today": local_today().isoformat(),
        },
    )


@app.post("/app/transactions")
async def create_transaction(
    request: Request,
    context: ProfileContext = Depends(get_profile_context),
):
    form = await check_form_csrf(request)
    try:
        data = TransactionIn(
            amount=parse_amount(str(form.get("amount", ""))),
            description=form.get("description", ""),
            category=form.get("category", ""),
            type=TransactionType(form.get("type", "")),
            date=date.fromisoformat(str(form.get("date", ""))),
        )
        context.service.add_transaction(data)
    except ValueError as exc:
        logger.warning(f"add transaction rejected: {exc}")
        flash(request, "Failed to add transaction")
    else:
        flash(request, "Transaction added successfully")
    return redirect_to(request, "transactions_page", str(request.url.query))


@app.post("/app/transactions/{transaction_id}/delete")
async def delete_transaction(
    transaction_id: str,
    request: Request,
    context: ProfileContext = Depends(get_profile_context),
):
    await check_form_csrf(request)
    try:
        context.service.delete_transaction(transaction_id)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    flash(request, "Transaction deleted")
    return redirect_to(request, "transactions_page", str(request.url.query))


@app.get("/app/budgeting", response_class=HTMLResponse)
def budgeting_page(
    request: Request,
    context: ProfileContext = Depends(get_profile_context),
):
    service = context.service
    period = period_from_request(request)
    transactions = filter_transactions(service.get_transactions(), period)
    limits = service.get_budget_limits()
    unbudgeted = [c for c in DEFAULT_CATEGORIES if c not in limits]
    return render(
        request,
        "budgeting.html",
        {
            "active_view": "budgeting",
            "period": period,
            "progress": budget_progress(transactions, limits),
            "unbudgeted": unbudgeted,
        },
    )


@app.post("/app/budgeting")
async def update_budgets(
    request: Request,
    context: ProfileContext = Depends(get_profile_context),
):
    form = await check_form_csrf(request)
    limits: dict[str, Decimal] = {}
    try:
        for category, amount in zip(form.getlist("category"), form.getlist("amount")):
            category = str(category).strip()
            if not category or not str(amount).strip():
                continue
            limits[category] = parse_amount(str(amount))
        context.service.update_budget_limits(limits)
    except ValueError as exc:
        logger.warning(f"budget update rejected: {exc}")
        flash(request, "Failed to update budgets")
    else:
        flash(request, "Budgets updated successfully!")
    return redirect_to(request, "budgeting_page")


@app.post("/app/balance")
async def update_initial_balance(
    request: Request,
    context: ProfileContext = Depends(get_profile_context),
):
    form = await check_form_csrf(request)
    try:
        amount = parse_amount(str(form.get("initial_balance", "")), allow_negative=True)
        context.update(context.profile.model_copy(update={"initial_balance": amount}))
    except ValueError as exc:
        logger.warning(f"initial balance update rejected: {exc}")
        flash(request, "Failed to update initial balance")
    else:
        flash(request, "Initial balance updated")
    return redirect_to(request, "overview")


@app.post("/app/tour/complete")
async def complete_tour(
    request: Request,
    context: ProfileContext = Depends(get_profile_context),
):
    await check_form_csrf(request)
    context.update(context.profile.model_copy(update={"tour_completed": True}))
    return redirect_to(request, "overview")


SETTINGS_TABS = ("account", "preferences", "notifications")


@app.get("/app/settings", response_class=HTMLResponse)
def settings_page(
    request: Request,
    context: ProfileContext = Depends(get_profile_context),
):
    tab = request.query_params.get("tab", "account")
    if tab not in SETTINGS_TABS:
        tab = "account"
    return render(
        request,
        "settings.html",
        {"active_view": "settings", "tab": tab, "tabs": SETTINGS_TABS},
    )


@app.post("/app/settings")
async def save_settings(
    request: Request,
    context: ProfileContext = Depends(get_profile_context),
):
    form = await check_form_csrf(request)
    tab = form.get("tab", "account")
    updates: dict[str, object] = {}
    if tab == "account":
        updates["name"] = str(form.get("name", "")).strip()
    elif tab == "preferences":
        updates["currency"] = form.get("currency", CurrencyCode.idr.value)
        updates["language"] = form.get("language", Language.en.value)
        updates["dark_mode"] = form.get("dark_mode") == "on"
    elif tab == "notifications":
        updates["email_alerts"] = form.get("email_alerts") == "on"
        updates["monthly_report"] = form.get("monthly_report") == "on"
    try:
        merged = context.profile.model_dump()
        merged.update(updates)
        context.update(UserProfile.model_validate(merged))
    except ValueError as exc:
        logger.warning(f"settings update rejected: {exc}")
        flash(request, "Failed to save settings")
    else:
        flash(request, "Settings saved successfully!")
    return redirect_to(request, "settings_page", f"tab={tab}")


@app.get("/onboarding", response_class=HTMLResponse)
def onboarding_page(
    request: Request,
    context: ProfileContext = Depends(get_profile_context),
):
    if context.profile.onboarding_completed or context.service.is_demo_mode():
        return redirect_to(request, "overview")
    wizard = OnboardingWizard.from_session(request.session.get("onboarding"))
    return render(
        request,
        "onboarding.html",
        {"wizard": wizard, "t": get_translations(wizard.language)},
    )


@app.post("/onboarding")
async def onboarding_step(
    request: Request,
    context: ProfileContext = Depends(get_profile_context),
):
    form = await check_form_csrf(request)
    wizard = OnboardingWizard.from_session(request.session.get("onboarding"))
    try:
        wizard.apply(form)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    action = form.get("action", "next")
    if action == "back":
        wizard.back()
    elif action == "finish":
        try:
            context.update(wizard.finish(context.profile))
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        request.session.pop("onboarding", None)
        flash(request, "Setup complete!")
        return redirect_to(request, "overview")
    else:
        wizard.next()
    request.session["onboarding"] = wizard.to_session()
    return redirect_to(request, "onboarding_page")


# JSON API


@app.get("/api/session", response_model=SessionInfo)
def api_session(
    request: Request, service: FinanceService = Depends(get_finance_service)
):
    if service.is_demo_mode():
        mode = "demo"
    elif service.auth_session is not None:
        mode = "live"
    else:
        mode = "anonymous"
    return SessionInfo(
        authenticated=mode != "anonymous",
        mode=mode,
        email=service.auth_session.email if service.auth_session else None,
        csrf_token=generate_csrf_token(client_id_for(request)),
    )


@app.get("/api/profile", response_model=UserProfile)
def api_get_profile(context: ProfileContext = Depends(get_profile_context)):
    return context.profile


@app.put("/api/profile", response_model=UserProfile)
def api_update_profile(
    request: Request,
    profile: UserProfile,
    context: ProfileContext = Depends(get_profile_context),
):
    check_header_csrf(request)
    try:
        context.update(profile)
    except NotAuthenticatedError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    return context.profile


@app.get("/api/transactions", response_model=list[TransactionOut])
def api_transactions(
    request: Request, service: FinanceService = Depends(require_access)
):
    period = period_from_request(request)
    return filter_transactions(service.get_transactions(), period)


@app.post("/api/transactions", response_model=TransactionOut, status_code=201)
def api_create_transaction(
    request: Request,
    data: TransactionIn,
    service: FinanceService = Depends(require_access),
):
    check_header_csrf(request)
    try:
        return service.add_transaction(data)
    except NotAuthenticatedError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc


@app.delete("/api/transactions/{transaction_id}", status_code=204)
def api_delete_transaction(
    transaction_id: str,
    request: Request,
    service: FinanceService = Depends(require_access),
):
    check_header_csrf(request)
    try:
        service.delete_transaction(transaction_id)
    except NotAuthenticatedError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return Response(status_code=204)


@app.get("/api/budgets", response_model=dict[str, Decimal])
def api_budgets(service: FinanceService = Depends(require_access)):
    return service.get_budget_limits()


@app.put("/api/budgets", response_model=dict[str, Decimal])
def api_update_budgets(
    request: Request,
    limits: dict[str, Decimal] = Body(...),
    service: FinanceService = Depends(require_access),
):
    check_header_csrf(request)
    try:
        return service.update_budget_limits(limits)
    except NotAuthenticatedError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@app.get("/api/stats")
def api_stats(
    request: Request, context: ProfileContext = Depends(get_profile_context)
):
    period = period_from_request(request)
    transactions = filter_transactions(context.service.get_transactions(), period)
    stats: DashboardStats = dashboard_stats(transactions, context.profile.initial_balance)
    return {
        **stats.model_dump(mode="json", by_alias=True),
        "status": savings_status(stats),
        "period": {"slug": period.slug, "start": period.start, "end": period.end},
    }


@app.get("/api/analytics")
def api_analytics(
    request: Request, service: FinanceService = Depends(require_access)
):
    period = period_from_request(request)
    transactions = filter_transactions(service.get_transactions(), period)
    progress: list[BudgetProgress] = budget_progress(
        transactions, service.get_budget_limits()
    )
    daily = daily_cash_flow(transactions, period)
    monthly = monthly_cash_flow(transactions)
    return {
        "monthly": [p.model_dump(mode="json", by_alias=True) for p in monthly],
        "daily": [p.model_dump(mode="json", by_alias=True) for p in daily],
        "topCategories": [
            c.model_dump(mode="json", by_alias=True)
            for c in top_spending_categories(transactions)
        ],
        "budgets": [b.model_dump(mode="json", by_alias=True) for b in progress],
    }
