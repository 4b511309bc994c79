def sse(event: str, data: str) -> str:
    lines = (data or "").split("\n")
    payload = "".join(f"data: {line}\n" for line in lines)
    return f"event: {event}\n{payload}\n"
