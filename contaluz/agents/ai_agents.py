"""
AI Agents for ContaLuz

DESIGN DECISION: Generative text is an ADVISOR, never a source of truth.
Every number the user relies on (balance, autonomy, deviation) is computed
deterministically by the tracker. The model only phrases advice around
numbers we hand it.

CRITICAL BOUNDARIES:

1. ENERGY ADVISOR:
   - CAN: Suggest place names, saving tips, a recharge strategy, and explain
     a change in consumption
   - CANNOT: Change the tracker state
   - CANNOT: Block the user when it is unavailable

2. FALLBACKS:
   - Every call has a deterministic fallback (an empty list, static tips,
     None, or a sentence built from the deviation)
   - A failure is logged and never raised to the caller
"""

import json
from typing import Any, Literal, Optional

import google.generativeai as genai
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential

from contaluz.audit import get_logger
from contaluz.config import get_settings
from contaluz.config.settings import GeminiSettings
from contaluz.models.energy import CURRENCY, Appliance, Profile
from contaluz.projection.autonomy import recharge_target


logger = get_logger(__name__)


LocationLevel = Literal["city", "district", "neighborhood"]

LOCATION_LEVEL_LABELS = {
    "city": "cidades ou municípios",
    "district": "distritos",
    "neighborhood": "bairros",
}


class AdvisorModel(BaseModel):
    """Responses come back camelCased; both spellings are accepted."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class EnergyTip(AdvisorModel):
    """A personalised saving tip."""

    title: str = Field(..., min_length=1)
    description: str
    estimated_saving: str = Field(
        ...,
        description="Estimated saving in MT or kWh, as text (e.g. '50 MT/mês')"
    )


class UsageReduction(AdvisorModel):
    """An appliance whose usage should be cut, and how."""

    name: str
    new_time: str = ""
    reason: str = ""


class RechargeStrategy(AdvisorModel):
    """
    Plan for making a recharge last a chosen number of days.

    The daily limits come from the deterministic recharge target; the model
    only fills in the wording.
    """

    explanation: str
    stop_using: list[str] = Field(default_factory=list)
    reduce_usage: list[UsageReduction] = Field(default_factory=list)
    daily_plan: str = ""


FALLBACK_TIPS = (
    EnergyTip(
        title="Desligue as luzes",
        description="Lembre-se de desligar luzes em cômodos vazios.",
        estimated_saving=f"50 {CURRENCY}/mês",
    ),
    EnergyTip(
        title="Uso do Ferro",
        description="Acumule roupas para engomar tudo de uma vez.",
        estimated_saving=f"120 {CURRENCY}/mês",
    ),
)


def fallback_insight(deviation_percent: float) -> str:
    direction = "mais alto" if deviation_percent >= 0 else "mais baixo"
    return (
        f"O consumo está {abs(deviation_percent):.0f}% {direction}. "
        "Verifique o uso de aparelhos de alta potência ou a quantidade de "
        "lâmpadas ligadas para entender melhor a variação."
    )


def extract_json(text: str, opener: str = "{") -> Any:
    """
    Find the JSON value in a model response.

    Models wrap JSON in prose or code fences; we take the outermost
    object (or array, with opener="[").
    """
    closer = "}" if opener == "{" else "]"
    start = text.find(opener)
    end = text.rfind(closer) + 1
    if start < 0 or end <= start:
        raise ValueError(f"No JSON {'object' if opener == '{' else 'array'} in response")
    return json.loads(text[start:end])


def describe_appliances(appliances: list[Appliance]) -> str:
    """One line per active appliance, as the prompts expect."""
    active = [a for a in appliances if a.is_active]
    if not active:
        return "nenhum aparelho ativo"
    return ", ".join(
        f"{a.quantity}x {a.name} ({a.power_watts:g}W cada, {a.hours_per_day:g}h/dia cada)"
        for a in active
    )


class EnergyAdvisorAgent:
    """
    Gemini-backed advisor for the tips, simulator and history screens.

    RESPONSIBILITIES:
    - Suggest real place names while the profile is filled in
    - Generate saving tips from the appliance list
    - Draft a recharge strategy for the autonomy simulator
    - Explain a month-over-month change in consumption

    BOUNDARIES:
    - NEVER mutates state
    - NEVER raises to the caller; falls back instead
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model=None,
    ):
        self._settings = settings or get_settings().gemini
        self._model = model if model is not None else self._configure_genai()

    def _configure_genai(self):
        """Configure Google Generative AI."""
        genai.configure(api_key=self._settings.api_key)
        return genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
            }
        )

    async def _generate(self, prompt: str) -> str:
        """Call the model with retries; the last error propagates."""
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._settings.max_attempts),
            wait=wait_exponential(multiplier=1, min=2, max=10),
            reraise=True,
        ):
            with attempt:
                response = await self._model.generate_content_async(prompt)
                return response.text.strip()

    async def suggest_locations(
        self,
        level: LocationLevel,
        parent: str,
        context: Optional[dict[str, str]] = None,
    ) -> list[str]:
        """
        Suggest 5 to 8 real place names inside ``parent``.

        Returns an empty list when the model is unavailable.
        """
        context = context or {}
        context_lines = [
            f"{label}: {context[key]}"
            for key, label in (("province", "Província"), ("city", "Cidade"), ("district", "Distrito"))
            if context.get(key)
        ]

        prompt = f"""Como um especialista em geografia de Moçambique, forneça uma lista de 5 a 8 nomes reais de {LOCATION_LEVEL_LABELS[level]}
que pertencem a: {parent}.

Contexto adicional:
{chr(10).join(context_lines) or 'nenhum'}

Responda APENAS com um objeto JSON neste formato exato:
{{"suggestions": ["Nome 1", "Nome 2"]}}"""

        try:
            data = extract_json(await self._generate(prompt))
            suggestions = data.get("suggestions", [])
            return [str(s).strip() for s in suggestions if str(s).strip()]
        except Exception as e:
            logger.warning("location_suggestions_failed", level=level, parent=parent, error=str(e))
            return []

    async def energy_tips(
        self,
        appliances: list[Appliance],
        profile: Profile,
    ) -> list[EnergyTip]:
        """Three personalised saving tips, or the two static ones."""
        total_kwh = sum(a.daily_kwh for a in appliances if a.is_active)

        prompt = f"""Como assistente virtual do app ContaLuz (Moçambique), analise os aparelhos elétricos desta residência e forneça 3 dicas práticas de economia de energia personalizadas.

Perfil: Residência tipo {profile.residence_type} em {profile.address or profile.province}.
Consumo estimado atual: {total_kwh:.2f} kWh/dia.
Aparelhos principais (incluindo quantidades): {describe_appliances(appliances)}.

Importante: Se houver múltiplos aparelhos iguais (ex: 10 lâmpadas), sugira reduzir a quantidade de unidades ligadas simultaneamente se apropriado.

Responda APENAS com um array JSON neste formato exato:
[{{"title": "...", "description": "...", "estimatedSaving": "50 MT/mês"}}]"""

        try:
            data = extract_json(await self._generate(prompt), opener="[")
            tips = [EnergyTip.model_validate(item) for item in data]
            if tips:
                return tips
        except Exception as e:
            logger.warning("energy_tips_failed", error=str(e))

        return list(FALLBACK_TIPS)

    async def recharge_strategy(
        self,
        amount: float,
        days: float,
        appliances: list[Appliance],
        profile: Profile,
    ) -> Optional[RechargeStrategy]:
        """
        Usage plan for making ``amount`` last ``days``.

        Returns None when the inputs make no sense or the model fails; the
        simulator still shows the deterministic daily limits.
        """
        target = recharge_target(amount, days, profile.tariff_per_kwh)
        if target is None:
            return None

        prompt = f"""O usuário de Moçambique quer fazer uma recarga de {amount:g} {CURRENCY} durar {days:g} dias exatos.
Tarifa: {profile.tariff_per_kwh:g} {CURRENCY}/kWh. Total disponível: {target.kwh_available:.2f} kWh.
Limite diário sugerido: {target.kwh_per_day_limit:.2f} kWh/dia.

Aparelhos atuais (incluindo quantidades): {describe_appliances(appliances)}.

Crie uma estratégia de uso:
1. Quais aparelhos devem ser desligados completamente?
2. Quais aparelhos "secundários" devem ter tempo reduzido ou quantidade reduzida (ex: ligar apenas 2 lâmpadas em vez de 5)?
3. Cronograma sugerido de uso.

Responda APENAS com um objeto JSON com:
"explanation": Breve resumo da meta.
"stopUsing": Lista de nomes de aparelhos para desligar.
"reduceUsage": Lista de objetos {{"name", "newTime", "reason"}}.
"dailyPlan": String descrevendo o plano diário."""

        try:
            data = extract_json(await self._generate(prompt))
            return RechargeStrategy.model_validate(data)
        except (ValidationError, ValueError) as e:
            logger.warning("recharge_strategy_invalid", error=str(e))
        except Exception as e:
            logger.warning("recharge_strategy_failed", error=str(e))
        return None

    async def monthly_insight(
        self,
        appliances: list[Appliance],
        profile: Profile,
        deviation_percent: float,
    ) -> str:
        """At most three sentences on why consumption changed."""
        appliance_list = ", ".join(
            f"{a.quantity}x {a.name} ({a.daily_kwh:.2f} kWh/dia total)"
            for a in appliances
            if a.is_active
        ) or "nenhum aparelho ativo"
        direction = "superior" if deviation_percent >= 0 else "inferior"

        prompt = f"""Analise o consumo mensal de energia para um usuário em Moçambique.
O consumo atual está {abs(deviation_percent):.0f}% {direction} ao mês anterior.

Aparelhos e consumo diário individual: {appliance_list}.
Perfil: {profile.residence_type} em {profile.address or profile.province}.

Explique brevemente (máximo 3 frases) por que o consumo mudou, identificando quais aparelhos (e suas quantidades) são os maiores responsáveis pelo gasto ou pela economia. Seja específico.

Responda APENAS com um objeto JSON neste formato exato:
{{"insight": "..."}}"""

        try:
            data = extract_json(await self._generate(prompt))
            insight = str(data.get("insight", "")).strip()
            if insight:
                return insight
        except Exception as e:
            logger.warning("monthly_insight_failed", error=str(e))

        return fallback_insight(deviation_percent)
