import json


def size_in_kb(data) -> str:
    """Rough size of a JSON payload in KB, formatted for log lines."""
    try:
        size = len(json.dumps(data, ensure_ascii=False).encode("utf-8"))
    except (TypeError, ValueError):
        return "0.00"
    return f"{size / 1024:.2f}"
