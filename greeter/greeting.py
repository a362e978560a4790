"""Greeting text helpers."""

FALLBACK_VISITOR_NAME = "six-shot"

GREETING_TEMPLATE = "Hello, {name}! The temperature is {temperature:.1f} degrees Celsius in {city}"


def resolve_visitor_name(query_value: str | None, default_name: str = "") -> str:
    """Pick the query value, then the configured default, then the fallback; strip quotes."""
    name = query_value or default_name or FALLBACK_VISITOR_NAME
    return name.strip('"')


def format_greeting(name: str, temperature: float, city: str) -> str:
    return GREETING_TEMPLATE.format(name=name, temperature=temperature, city=city)
