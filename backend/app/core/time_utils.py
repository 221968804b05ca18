from datetime import date


def calculate_age(date_of_birth: date, today: date | None = None) -> int:
    """
    Whole years between date_of_birth and today.
    Example: born 2010-06-15, today 2025-06-14 -> 14
    """
    today = today or date.today()
    age = today.year - date_of_birth.year
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return age


def format_seconds(seconds, fmt: str = "hh:mm:ss") -> str:
    """
    Render a duration for display in one of the challenge time formats.
    Example: (754, 'mm:ss') -> '12:34', (3725, 'hh:mm:ss') -> '1:02:05'

    Returns '' for empty or non-positive values.
    """
    if not seconds or seconds <= 0:
        return ""
    if fmt == "seconds":
        return f"{seconds:g}"

    total = int(round(seconds))
    if fmt == "mm:ss":
        return f"{total // 60}:{total % 60:02d}"
    if fmt == "hh:mm:ss":
        hours = total // 3600
        minutes = (total % 3600) // 60
        secs = total % 60
        if hours > 0:
            return f"{hours}:{minutes:02d}:{secs:02d}"
        return f"{minutes}:{secs:02d}"
    raise ValueError(f"Unknown time format: {fmt}")


def parse_time(text: str | None, fmt: str = "hh:mm:ss") -> float:
    """
    Parse a user-entered duration into seconds.
    Example: ('12:34', 'mm:ss') -> 754, ('1:02:05', 'hh:mm:ss') -> 3725

    A bare number is always read as seconds. Returns 0 for empty strings.
    """
    if text is None:
        return 0
    s = text.strip()
    if s == "":
        return 0

    if fmt == "seconds":
        try:
            return float(s)
        except ValueError:
            raise ValueError("Time must be a number of seconds")

    try:
        parts = [int(p) for p in s.split(":")]
    except ValueError:
        raise ValueError(f"Time must be in {fmt} format")

    if len(parts) == 1:
        return parts[0]
    if len(parts) == 2:
        return parts[0] * 60 + parts[1]
    if len(parts) == 3 and fmt == "hh:mm:ss":
        return parts[0] * 3600 + parts[1] * 60 + parts[2]
    raise ValueError(f"Time must be in {fmt} format")
