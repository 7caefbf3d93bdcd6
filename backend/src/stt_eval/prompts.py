"""Fixed alphanumeric prompt sets read aloud by testers."""

from pydantic import BaseModel


class Prompt(BaseModel):
    id: str
    text: str


EN_PROMPTS: list[Prompt] = [
    Prompt(id="en-1", text="My account is A9X-42-Beta!"),
    Prompt(id="en-2", text="Please confirm ZIP 94107 and SSN last four 1234."),
    Prompt(id="en-3", text="Payment code X7Q4-9Z. Amount $128.50."),
    Prompt(id="en-4", text="Email: test+dev@example.com."),
    Prompt(id="en-5", text="Plate number ABC-1234."),
    # C/D/E/P/M/N confusion
    Prompt(id="en-6", text="Reference code C-D-E-3-P-M-N."),
    Prompt(id="en-7", text="Serial: M8N2-P5D1-C7E4."),
    Prompt(id="en-8", text="Confirmation B3P-D9M-E2C-N7."),
    Prompt(id="en-9", text="Model CD-MN-PE dash 2024."),
    Prompt(id="en-10", text="License NPC-DME-3517."),
    Prompt(id="en-11", text="VIN: 1C4RJFBG8EC123456."),
    Prompt(id="en-12", text="Part number: F8B-C2D-M5N-P1E."),
    Prompt(id="en-13", text="Tracking: 9B2E-4D7C-6M1P."),
    Prompt(id="en-14", text="Password: Delta3Echo5Mike7."),
    Prompt(id="en-15", text="Code: C as in Cat, D as in Dog, M as in Mike."),
]

ES_PROMPTS: list[Prompt] = [
    Prompt(id="es-1", text="Mi código es B12-7Z, ¡con signo de exclamación!"),
    Prompt(id="es-2", text="Confirma: código postal 28013 y DNI 1234."),
    Prompt(id="es-3", text="Importe 128,50 euros."),
    Prompt(id="es-4", text="Correo: prueba+qa@ejemplo.com."),
    Prompt(id="es-5", text="Matrícula ABC-1234."),
    # C/D/E/P/M/N confusion
    Prompt(id="es-6", text="Código de referencia C-D-E-3-P-M-N."),
    Prompt(id="es-7", text="Serie: M8N2-P5D1-C7E4."),
    Prompt(id="es-8", text="Confirmación B3P-D9M-E2C-N7."),
    Prompt(id="es-9", text="Modelo CD guion MN guion PE guion 2024."),
    Prompt(id="es-10", text="Matrícula NPC-DME-3517."),
]

PROMPT_SETS: dict[str, list[Prompt]] = {
    "default": EN_PROMPTS,
}


def select_prompts(locale: str, example_set: str = "default") -> list[Prompt]:
    """Return the prompts for ``locale``.

    Spanish always uses the Spanish set. Other locales use the named English
    example set, falling back to the default one.
    """
    if locale == "es":
        return ES_PROMPTS
    return PROMPT_SETS.get(example_set.lower(), EN_PROMPTS)
