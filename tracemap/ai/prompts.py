"""Prompt templates and canned explanations for TraceMap AI explanations."""

EMAIL_EXPLANATION_PROMPT = (
    'Explain WHY the risk level "{risk_level}" was assigned to {masked_email} '
    "(Score: {risk_score}/10.0). Bullet points, professional academic tone."
)

MODULE_EXPLANATION_PROMPT = (
    "Explain why a {module} OSINT risk score of {risk_score:.1f} ({risk_level}) "
    "was assigned to {input_value}. 4 bullet points, calm academic language. No hacking."
)

EMAIL_FALLBACK_EXPLANATION = [
    "Analyzing digital footprints...",
    "Mapping platform reuse signals...",
    "Calculating metadata visibility...",
]

MODULE_FALLBACK_EXPLANATION = [
    "The {module} analysis has identified deterministic patterns in public footprints.",
    "Educational awareness of these vectors is recommended for privacy.",
]


def format_score(score: float) -> str:
    """Render a score like the web client does: 6.0 -> "6", 6.5 -> "6.5"."""
    return f"{score:g}"


def email_prompt(masked_email: str, risk_score: float, risk_level: str) -> str:
    return EMAIL_EXPLANATION_PROMPT.format(
        risk_level=risk_level,
        masked_email=masked_email,
        risk_score=format_score(risk_score),
    )


def module_prompt(module: str, input_value: str, risk_score: float, risk_level: str) -> str:
    return MODULE_EXPLANATION_PROMPT.format(
        module=module,
        risk_score=risk_score,
        risk_level=risk_level,
        input_value=input_value,
    )


def module_fallback(module: str) -> list[str]:
    return [line.format(module=module) for line in MODULE_FALLBACK_EXPLANATION]
