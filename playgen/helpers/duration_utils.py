def mmss_from_seconds(sec) -> str:
    try:
        sec = int(sec or 0)
    except (TypeError, ValueError):
        sec = 0
    m = max(0, sec) // 60
    s = max(0, sec) % 60
    return f"{m}:{s:02d}"


def ms_to_mmss(ms: int) -> str:
    ms = max(0, int(ms))
    return mmss_from_seconds(ms // 1000)
