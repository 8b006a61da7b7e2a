import json
import logging
from functools import wraps

from django.contrib.auth.decorators import login_required
from django.http import HttpResponse, JsonResponse
from django.views.decorators.http import require_http_methods

from menus.exceptions import MenuBadRequest, MenuError
from menus.forms import MenuItemForm, MoveForm, ReorderForm, ReorderTreeForm
from menus.models import Domain, State, StructuralSubtype
from menus.serializers import from_wire, serialize_menu_item
from menus.services import KEEP_PARENT, MenuItemService
from menus.services.hierarchy import hierarchy_payload

logger = logging.getLogger(__name__)


def _service():
    return MenuItemService()


def _json_body(request) -> dict:
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (ValueError, UnicodeDecodeError):
        raise MenuBadRequest("Request body is not valid JSON")
    if not isinstance(data, dict):
        raise MenuBadRequest("Request body must be a JSON object")
    return data


def _include_archived(request) -> bool:
    return request.GET.get("includeArchived") == "true"


def _check_choice(value, choices, label):
    if value not in choices.values:
        raise MenuBadRequest(f"Invalid {label}: {value!r}")


def _items(items):
    return JsonResponse([serialize_menu_item(i) for i in items], safe=False)


def _form_error(form):
    return JsonResponse({"error": "Validation failed", "fields": form.errors.get_json_data()}, status=400)


def menu_api(view):
    """Turn MenuError into a JSON error response with its status code."""

    @wraps(view)
    def wrapper(request, *args, **kwargs):
        try:
            return view(request, *args, **kwargs)
        except MenuError as e:
            if e.status_code >= 500:
                logger.exception("Menu API error")
            return JsonResponse({"error": e.message}, status=e.status_code)

    return wrapper


# -- collection ------------------------------------------------------------

@require_http_methods(["GET", "POST"])
def menu_items(request):
    if request.method == "POST":
        return _create(request)
    return _list(request)


@menu_api
def _list(request):
    return _items(_service().filter_items(request.GET))


@login_required
@menu_api
def _create(request):
    form = MenuItemForm(from_wire(_json_body(request)))
    if not form.is_valid():
        return _form_error(form)
    item = _service().create(form.cleaned_fields())
    return JsonResponse(serialize_menu_item(item), status=201)


@require_http_methods(["GET"])
@menu_api
def menu_hierarchy(request, domain):
    _check_choice(domain, Domain, "domain")
    hierarchy = _service().build_hierarchy(domain, include_archived=_include_archived(request))
    return JsonResponse(hierarchy_payload(domain, hierarchy, serialize_menu_item))


@require_http_methods(["GET"])
@menu_api
def menu_items_by_group(request, domain, structural_subtype=None, state=None):
    _check_choice(domain, Domain, "domain")
    if structural_subtype is not None:
        _check_choice(structural_subtype, StructuralSubtype, "structuralSubtype")
    if state is not None:
        _check_choice(state, State, "state")
    items = _service().find_by_group(
        domain, structural_subtype, state, include_archived=_include_archived(request)
    )
    return _items(items)


# -- single item -----------------------------------------------------------

@require_http_methods(["GET", "PATCH", "DELETE"])
def menu_item_detail(request, pk: int):
    if request.method == "PATCH":
        return _update(request, pk)
    if request.method == "DELETE":
        return _remove(request, pk)
    return _find_one(request, pk)


@menu_api
def _find_one(request, pk):
    return JsonResponse(serialize_menu_item(_service().find_one(pk)))


@login_required
@menu_api
def _update(request, pk):
    payload = _json_body(request)
    form = MenuItemForm(from_wire(payload), partial=True)
    if not form.is_valid():
        return _form_error(form)
    item = _service().update(pk, form.cleaned_fields(), expected_version=payload.get("version"))
    return JsonResponse(serialize_menu_item(item))


@login_required
@menu_api
def _remove(request, pk):
    _service().remove(pk)
    return HttpResponse(status=204)


@login_required
@require_http_methods(["PATCH"])
@menu_api
def menu_item_archive(request, pk: int):
    return JsonResponse(serialize_menu_item(_service().archive(pk)))


@login_required
@require_http_methods(["PATCH"])
@menu_api
def menu_item_unarchive(request, pk: int):
    return JsonResponse(serialize_menu_item(_service().unarchive(pk)))


# -- ordering --------------------------------------------------------------

@login_required
@require_http_methods(["POST"])
@menu_api
def menu_item_move(request, pk: int):
    """Body: {"sortId": P, "parentId": X}. Omit parentId to stay under the
    current parent; null moves the item to the root group.
    """
    form = MoveForm(from_wire(_json_body(request)))
    if not form.is_valid():
        return _form_error(form)
    target = form.cleaned_data["parent_id"] if form.has_parent() else KEEP_PARENT
    item = _service().move(pk, form.cleaned_data["sort_id"], target)
    return JsonResponse(serialize_menu_item(item))


@login_required
@require_http_methods(["POST"])
@menu_api
def menu_reorder(request, domain, structural_subtype, state):
    payload = _json_body(request)
    form = ReorderForm({"item_ids": payload.get("itemIds")})
    if not form.is_valid():
        return _form_error(form)
    items = _service().reorder_flat(domain, structural_subtype, state, form.cleaned_data["item_ids"])
    return _items(items)


@login_required
@require_http_methods(["POST"])
@menu_api
def menu_reorder_tree(request, domain, structural_subtype, state):
    payload = _json_body(request)
    form = ReorderTreeForm({"items": payload.get("items")})
    if not form.is_valid():
        return _form_error(form)
    items = _service().reorder_tree(domain, structural_subtype, state, form.cleaned_data["items"])
    return _items(items)
