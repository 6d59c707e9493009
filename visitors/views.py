from django.conf import settings
from django.http import JsonResponse
from django.views.decorators.http import require_GET, require_POST

from .services import WhatsAppSubmission, get_whatsapp_numbers_service
from .tracking import VisitorTracker


@require_GET
def popup_status(request):
    """Called by the popup script once per page view; counts as a visit."""
    tracker = VisitorTracker.for_request(request)
    return JsonResponse({
        "show": tracker.should_show_popup(),
        "delay_ms": getattr(settings, "POPUP_DELAY_MS", 2000),
    })


@require_POST
def popup_shown(request):
    tracker = VisitorTracker.for_request(request)
    tracker.mark_popup_shown()
    return JsonResponse({"ok": True})


@require_POST
def submit_whatsapp(request):
    tracker = VisitorTracker.for_request(request)
    submission = WhatsAppSubmission(
        whatsapp_number=request.POST.get("whatsapp_number", ""),
        country_code=request.POST.get("country_code") or None,
    )
    result = get_whatsapp_numbers_service().submit_whatsapp_number(submission, tracker)
    if not result.success:
        return JsonResponse({"success": False, "error": result.error}, status=400)
    tracker.mark_popup_shown()
    return JsonResponse({"success": True, "error": None})
