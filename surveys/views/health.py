"""
System status for operators.

Staff-only JSON endpoint reporting database/cache health, host metrics
and recent warnings from the application log.
"""
import logging
from pathlib import Path

import psutil
from django.contrib.admin.views.decorators import staff_member_required
from django.core.cache import cache
from django.db import DatabaseError, connection
from django.http import JsonResponse
from django.utils import timezone

from courseportal.settings.config import HEALTH

logger = logging.getLogger(__name__)

IMPORTANT_LEVELS = ("WARNING", "ERROR", "CRITICAL")


def read_recent_warnings(log_file: Path, limit: int) -> list[dict]:
    """Return the last `limit` WARNING+ entries of a plain-text log file."""
    if not log_file.exists():
        return []
    entries = []
    with open(log_file, "r", encoding="utf-8", errors="replace") as f:
        for line in f.readlines()[-limit * 2:]:
            level = line.split(" ", 1)[0]
            if level in IMPORTANT_LEVELS:
                entries.append({"levelname": level, "message": line.strip()})
    return entries[-limit:]


@staff_member_required
def health_status(request):
    """JSON API for health checks, metrics and recent warnings."""
    health = {
        "database": "OK",
        "cache": "OK",
        "status": "OK",
    }

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
    except DatabaseError as e:
        health["database"] = f"ERROR: {e}"
        health["status"] = "ERROR"
        logger.error("Health check: database error - %s", e)

    try:
        cache.set("health_check", "ok", 1)
        if cache.get("health_check") != "ok":
            raise RuntimeError("cache verification failed")
    except Exception as e:
        health["cache"] = f"ERROR: {e}"
        health["status"] = "ERROR"
        logger.error("Health check: cache error - %s", e)

    memory = psutil.virtual_memory()
    disk = psutil.disk_usage("/")
    metrics = {
        "cpu_percent": psutil.cpu_percent(interval=0.1),
        "memory_percent": memory.percent,
        "memory_used_gb": memory.used / (1024**3),
        "memory_total_gb": memory.total / (1024**3),
        "disk_percent": disk.percent,
        "disk_used_gb": disk.used / (1024**3),
        "disk_total_gb": disk.total / (1024**3),
    }

    try:
        logs = read_recent_warnings(
            Path(HEALTH.LOG_DIR) / "courseportal.log", HEALTH.HEALTH_LOG_ENTRIES
        )
    except OSError as e:
        logger.error("Error reading log file: %s", e)
        logs = [{"message": f"Error reading logs: {e}", "levelname": "ERROR"}]

    return JsonResponse(
        {
            "timestamp": timezone.now().isoformat(),
            "health": health,
            "metrics": metrics,
            "logs": logs,
            "log_count": len(logs),
        },
        status=200 if health["status"] == "OK" else 503,
    )
