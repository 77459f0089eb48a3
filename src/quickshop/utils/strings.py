def trim(value: str | None) -> str | None:
  if value is None:
    return None
  trimmed = value.strip()
  if not trimmed:
    return None
  return trimmed


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
  if count == 1:
    return singular
  return plural or f"{singular}s"
