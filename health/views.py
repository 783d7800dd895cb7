from datetime import datetime, timezone

from asgiref.sync import sync_to_async
from django.db import connection
from django.http import JsonResponse


def _db_reachable():
    # Simple DB health check
    with connection.cursor() as cursor:
        cursor.execute("SELECT 1;")
        row = cursor.fetchone()
    return row == (1,)


async def health_view(request):
    return JsonResponse(
        {
            "status": "success",
            "ok": True,
            "db": {
                "reachable": await sync_to_async(_db_reachable)(),
            },
            "timestamp": int(datetime.now(timezone.utc).timestamp() * 1000),
        }
    )
