# sage_insights/web/pages.py
import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from sage_insights.core.config import Settings, get_settings
from sage_insights.core.session import Session, require_session
from sage_insights.web.dashboard import ViewRegistry
from sage_insights.web.layout import layout_template

router = APIRouter(tags=["pages"])
logger = logging.getLogger("pages")


def get_registry(request: Request) -> ViewRegistry:
    return request.app.state.registry


def render(request: Request, template: str, settings: Settings, **context):
    context.setdefault("notifications", [])
    context["layout"] = layout_template(request.url.path, settings.LOGIN_PATH)
    context["login_path"] = settings.LOGIN_PATH
    context["dashboard_path"] = settings.DASHBOARD_PATH
    return request.app.state.templates.TemplateResponse(request, template, context)


# ============================================================
# GET /ai-insights
# ============================================================
@router.get("/ai-insights", response_class=HTMLResponse)
async def ai_insights_page(
    request: Request,
    lab_id: Optional[str] = Query(None),
    session: Session = Depends(require_session),
    registry: ViewRegistry = Depends(get_registry),
    settings: Settings = Depends(get_settings),
):
    view = registry.get(session.user_id)
    await view.mount(session.user_id, auto_select=not lab_id)
    if lab_id:
        await view.select_lab(lab_id)

    return render(
        request,
        "ai_insights.html",
        settings,
        view=view,
        notifications=view.notifier.drain(),
    )


# ============================================================
# Login (presence-only session cookies)
# ============================================================
@router.get("/login", response_class=HTMLResponse)
def login_page(request: Request, settings: Settings = Depends(get_settings)):
    return render(request, "login.html", settings)


@router.post("/login")
def login(
    user_id: str = Form(...),
    name: Optional[str] = Form(None),
    settings: Settings = Depends(get_settings),
):
    user = {"_id": user_id, "name": name}
    response = RedirectResponse(settings.DASHBOARD_PATH, status_code=303)
    response.set_cookie(settings.SESSION_FLAG_COOKIE, "true")
    response.set_cookie(settings.SESSION_USER_COOKIE, json.dumps(user, separators=(",", ":")))
    logger.info("session opened for user %s", user_id)
    return response


@router.get("/logout")
def logout(settings: Settings = Depends(get_settings)):
    response = RedirectResponse(settings.LOGIN_PATH, status_code=303)
    response.delete_cookie(settings.SESSION_FLAG_COOKIE)
    response.delete_cookie(settings.SESSION_USER_COOKIE)
    return response
