from django.http import HttpResponse, JsonResponse
from django.utils import timezone


def api_root(request):
    return JsonResponse({
        "message": "Task Management API Server is running!",
        "status": "success",
        "timestamp": timezone.now().isoformat(),
    })


def healthz(request):
    return HttpResponse("ok", content_type="text/plain")


def route_not_found(request, exception=None):
    return JsonResponse(
        {"success": False, "message": "Route not found", "path": request.path},
        status=404,
    )


def server_error(request):
    return JsonResponse({"success": False, "message": "Something went wrong!"}, status=500)
