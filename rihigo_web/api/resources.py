"""Resource Pages — list/detail/form/delete/action pages generated per API resource.

Invariants:
    - Every generated route runs behind the guard it was built with
    - Lists are fetched once, then searched/filtered/paginated locally
    - Successful writes redirect (303) with a toast; failed writes re-render the form
      with the submitted values and per-field errors
    - A missing resource (API 404) renders the not-found page; other load failures
      render the error page

Design Decisions:
    - One declarative ResourceView per resource instead of hand-written CRUD pages:
      vendor and admin areas share list, filter bar, table, form and confirm-modal markup
    - Form fields reuse FieldDefinition from the booking form so a single macro renders both
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import RedirectResponse, Response
from pydantic import ValidationError

from rihigo_web.api.dependencies import Services, get_services, push_toast
from rihigo_web.api.templating import render
from rihigo_web.core.api_response import ApiResponse, field_errors, get_error_message
from rihigo_web.core.auth_session import AuthSession
from rihigo_web.core.booking_fields import FieldDefinition
from rihigo_web.core.domain_types import FieldType, ToastType
from rihigo_web.core.errors import BackendApiError, ResourceNotFoundError
from rihigo_web.core.form_validation import coerce_values, validate_fields
from rihigo_web.core.list_filters import active_filters, filter_items, paginate, unique_values
from rihigo_web.schemas.forms import FormModel, form_errors
from rihigo_web.services.resource_api import ResourceEndpoint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Column:
    key: str
    label: str
    kind: str = "text"  # text | status | money | date | bool
    link: bool = False


@dataclass(frozen=True)
class ListFilter:
    key: str
    label: str
    options: tuple[str, ...] = ()  # empty: offer the values present in the list
    remote: bool = False  # also forwarded to the API as a query parameter


@dataclass(frozen=True)
class RowAction:
    name: str
    label: str
    method: str = "POST"
    confirm: str | None = None
    when_status: tuple[str, ...] = ()
    when_field: str = "status"
    fields: tuple[FieldDefinition, ...] = ()
    style: str = "primary"
    path: str | None = None  # API sub-path when it differs from name ("/{id}/status")
    body: Mapping[str, Any] = field(default_factory=dict, hash=False)
    wrap: Callable[[dict], dict] | None = field(default=None, hash=False)

    @property
    def api_path(self) -> str:
        return self.path or self.name

    def available_for(self, item: Mapping[str, Any]) -> bool:
        return not self.when_status or str(item.get(self.when_field)) in self.when_status

    def request_body(self, submitted: Mapping[str, Any]) -> dict[str, Any]:
        body = {**self.body, **submitted}
        return self.wrap(body) if self.wrap else body


@dataclass(frozen=True)
class ResourceView:
    slug: str
    title: str
    singular: str
    endpoint: Callable[[Services], ResourceEndpoint]
    columns: tuple[Column, ...]
    search_keys: tuple[str, ...] = ()
    filters: tuple[ListFilter, ...] = ()
    fields: tuple[FieldDefinition, ...] = ()
    schema: type[FormModel] | None = None
    edit_fields: tuple[FieldDefinition, ...] | None = None
    edit_schema: type[FormModel] | None = None
    actions: tuple[RowAction, ...] = ()
    detail_columns: tuple[Column, ...] = ()
    can_create: bool = True
    can_edit: bool = True
    can_delete: bool = True
    list_key: str | None = None
    title_key: str = "name"
    page_size: int = 20
    description: str = ""
    links: tuple[tuple[str, str], ...] = field(default=())  # (label, "/sub/path") on the detail page

    def form_for(self, editing: bool) -> tuple[tuple[FieldDefinition, ...], type[FormModel] | None]:
        if editing and (self.edit_fields is not None or self.edit_schema is not None):
            return self.edit_fields or self.fields, self.edit_schema or self.schema
        return self.fields, self.schema

    def action(self, name: str) -> RowAction | None:
        return next((a for a in self.actions if a.name == name), None)

    def item_title(self, item: Mapping[str, Any]) -> str:
        value = item.get(self.title_key) or item.get("name") or item.get("id")
        return str(value) if value is not None else self.singular


def parse_form(
    view_fields: tuple[FieldDefinition, ...],
    schema: type[FormModel] | None,
    form: Mapping[str, Any],
) -> tuple[dict[str, Any], dict[str, str]]:
    """Validate a submitted form. Returns (api_payload, errors)."""
    if schema is not None:
        try:
            return schema.model_validate(dict(form)).payload(), {}
        except ValidationError as exc:
            return {}, form_errors(exc, schema)
    fields = list(view_fields)
    values = coerce_values(fields, form)
    errors = validate_fields(fields, values)
    if errors:
        return {}, errors
    return {k: v for k, v in values.items() if v not in (None, "")}, {}


def load_or_raise(response: ApiResponse, resource_type: str, resource_id: str) -> Any:
    """Data of a single-resource response, or the matching page error."""
    if response.success and response.data is not None:
        return response.data
    if response.status_code == 404 or (response.success and response.data is None):
        raise ResourceNotFoundError(resource_type, resource_id)
    raise BackendApiError(get_error_message(response))


def redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=status.HTTP_303_SEE_OTHER)


def form_field(
    name: str, label: str, type: FieldType = FieldType.TEXT, required: bool = False, **kwargs: Any,
) -> FieldDefinition:
    """Shorthand for portal form definitions; options may be any iterable."""
    if "options" in kwargs:
        kwargs["options"] = tuple(str(o) for o in kwargs["options"])
    return FieldDefinition(name=name, type=type, label=label, required=required, **kwargs)


def build_resource_router(
    view: ResourceView,
    *,
    prefix: str,
    guard: Callable[..., Any],
    portal: str,
) -> APIRouter:
    """Routes for one resource under {prefix}/{slug}."""
    base_path = f"{prefix}/{view.slug}"
    router = APIRouter(prefix=base_path, tags=[f"{portal}-{view.slug}"])

    def context(**extra: Any) -> dict[str, Any]:
        return {"view": view, "portal": portal, "base_path": base_path, **extra}

    def render_form(
        request: Request, item: Mapping[str, Any] | None, values: Mapping[str, Any],
        errors: Mapping[str, str], error_message: str | None = None, status_code: int = 200,
    ) -> Response:
        fields, _ = view.form_for(editing=item is not None)
        return render(request, "portal/resource_form.html", context(
            item=item, values=values, errors=errors, error_message=error_message,
            fields=fields,
        ), status_code=status_code)

    @router.get("")
    async def list_page(
        request: Request,
        q: str | None = None,
        page: int = 1,
        auth: AuthSession = Depends(guard),
        services: Services = Depends(get_services),
    ):
        filter_keys = [f.key for f in view.filters]
        selected = active_filters(request.query_params, filter_keys)
        remote = {f.key: selected.get(f.key) for f in view.filters if f.remote}
        response = await view.endpoint(services).list(auth.access_token, remote)
        items = response.items(view.list_key) if response.success else []
        matched = filter_items(items, q, view.search_keys, selected)
        page_items, pagination = paginate(matched, page, view.page_size)
        filter_options = {
            f.key: list(f.options) or [str(v) for v in unique_values(items, f.key)]
            for f in view.filters
        }
        return render(request, "portal/resource_list.html", context(
            items=page_items,
            total=len(items),
            pagination=pagination,
            q=q or "",
            selected=selected,
            filter_options=filter_options,
            has_active_filters=bool(selected or q),
            error_message=None if response.success else get_error_message(response),
        ))

    if view.can_create:
        @router.get("/new")
        async def new_page(request: Request, auth: AuthSession = Depends(guard)):
            defaults = {f.name: f.default_value for f in view.fields if f.default_value is not None}
            defaults.update(request.query_params.items())
            return render_form(request, None, defaults, {})

        @router.post("/new")
        async def create(
            request: Request,
            auth: AuthSession = Depends(guard),
            services: Services = Depends(get_services),
        ):
            form = await request.form()
            payload, errors = parse_form(*view.form_for(editing=False), form)
            if errors:
                return render_form(request, None, form, errors, status_code=400)
            response = await view.endpoint(services).create(auth.access_token, payload)
            if not response.success:
                return render_form(
                    request, None, form, field_errors(response),
                    get_error_message(response), status_code=400,
                )
            logger.info(f"{portal} created {view.singular}", extra={"resource": view.slug})
            push_toast(request, ToastType.SUCCESS, f"{view.singular} created")
            created_id = response.data.get("id") if isinstance(response.data, dict) else None
            return redirect(f"{base_path}/{created_id}" if created_id else base_path)

    @router.get("/{item_id}")
    async def detail_page(
        request: Request,
        item_id: str,
        auth: AuthSession = Depends(guard),
        services: Services = Depends(get_services),
    ):
        response = await view.endpoint(services).get(auth.access_token, item_id)
        item = load_or_raise(response, view.singular, item_id)
        return render(request, "portal/resource_detail.html", context(
            item=item, item_id=item_id,
            actions=[a for a in view.actions if a.available_for(item)],
            detail_columns=view.detail_columns or view.columns,
        ))

    if view.can_edit:
        @router.get("/{item_id}/edit")
        async def edit_page(
            request: Request,
            item_id: str,
            auth: AuthSession = Depends(guard),
            services: Services = Depends(get_services),
        ):
            response = await view.endpoint(services).get(auth.access_token, item_id)
            item = load_or_raise(response, view.singular, item_id)
            return render_form(request, item, item, {})

        @router.post("/{item_id}/edit")
        async def update(
            request: Request,
            item_id: str,
            auth: AuthSession = Depends(guard),
            services: Services = Depends(get_services),
        ):
            form = await request.form()
            item = {"id": item_id}
            payload, errors = parse_form(*view.form_for(editing=True), form)
            if errors:
                return render_form(request, item, form, errors, status_code=400)
            response = await view.endpoint(services).update(auth.access_token, item_id, payload)
            if not response.success:
                return render_form(
                    request, item, form, field_errors(response),
                    get_error_message(response), status_code=400,
                )
            push_toast(request, ToastType.SUCCESS, f"{view.singular} updated")
            return redirect(f"{base_path}/{item_id}")

    if view.can_delete:
        @router.post("/{item_id}/delete")
        async def delete(
            request: Request,
            item_id: str,
            auth: AuthSession = Depends(guard),
            services: Services = Depends(get_services),
        ):
            response = await view.endpoint(services).delete(auth.access_token, item_id)
            if response.success:
                logger.info(f"{portal} deleted {view.singular}", extra={"resource": view.slug})
                push_toast(request, ToastType.SUCCESS, f"{view.singular} deleted")
                return redirect(base_path)
            push_toast(request, ToastType.ERROR, get_error_message(response))
            return redirect(f"{base_path}/{item_id}")

    if view.actions:
        @router.post("/{item_id}/actions/{action_name}")
        async def run_action(
            request: Request,
            item_id: str,
            action_name: str,
            auth: AuthSession = Depends(guard),
            services: Services = Depends(get_services),
        ):
            action = view.action(action_name)
            if action is None:
                raise HTTPException(status_code=404)
            submitted: dict[str, Any] = {}
            if action.fields:
                submitted, errors = parse_form(action.fields, None, await request.form())
                if errors:
                    push_toast(request, ToastType.ERROR, "; ".join(errors.values()))
                    return redirect(f"{base_path}/{item_id}")
            response = await view.endpoint(services).action(
                auth.access_token, item_id, action.api_path,
                action.request_body(submitted), method=action.method,
            )
            if response.success:
                push_toast(request, ToastType.SUCCESS, response.message or f"{action.label}: done")
            else:
                push_toast(request, ToastType.ERROR, get_error_message(response))
            return redirect(f"{base_path}/{item_id}")

    return router
