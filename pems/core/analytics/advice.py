"""
Khuyến nghị xử lý theo loại cảnh báo.
"""
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from config.thresholds_config import AMMONIA_ADVICE_IDEAL_PPM

_IDEAL_LOW, _IDEAL_HIGH = AMMONIA_ADVICE_IDEAL_PPM

TEMPERATURE_INTRO = (
    "High temperatures can cause significant stress to poultry. Ideal temperatures vary by bird "
    "age (e.g., chicks need ~32-35°C, older birds ~21-25°C). Your system detected high temperature."
)
TEMPERATURE_POINTS = [
    ("Ventilation", "Ensure all fans are operational and set to appropriate speeds. Open vents or curtains to maximize airflow."),
    ("Cool Water", "Provide access to plenty of cool, fresh drinking water. Consider adding ice to waterers in extreme heat."),
    ("Reduce Density", "If possible, reduce bird density to lower metabolic heat production."),
    ("Misting/Fogging", "If available, use misting or fogging systems to cool the air through evaporation."),
    ("Monitor Birds", "Observe for signs of heat stress: panting, lethargy, spreading wings, reduced feed intake. Seek veterinary advice if severe."),
    ("Check Setpoints", "Verify that your thermostat and controller setpoints are correct for the age of your flock."),
]

AMMONIA_INTRO = (
    "High ammonia levels are detrimental to poultry health, affecting respiratory systems and growth. "
    f"Ideal levels are below {_IDEAL_LOW}-{_IDEAL_HIGH} PPM. Your system detected high ammonia."
)
AMMONIA_POINTS = [
    ("Increase Ventilation", "Immediately increase ventilation rates. Good airflow helps remove ammonia."),
    ("Litter Management", "Inspect litter for wet spots, especially around drinkers and feeders. Remove caked or overly wet litter promptly."),
    ("Drinker Check", "Ensure drinkers are not leaking, as excess moisture contributes to ammonia production."),
    ("Litter Amendments", "Consider using a litter treatment product (e.g., acidifiers) to help neutralize ammonia. Follow product instructions carefully."),
    ("Bird Density", "Overcrowding can exacerbate ammonia issues. Ensure appropriate stocking density."),
]


class AdviceSection(BaseModel):
    intro: str
    points: List[Dict[str, str]] = Field(default_factory=list)


class Advice(BaseModel):
    title: str
    sections: List[AdviceSection] = Field(default_factory=list)


def _points(pairs) -> List[Dict[str, str]]:
    return [{"title": title, "text": text} for title, text in pairs]


def prescriptive_advice(alert_type: Optional[str], message: str = "") -> Advice:
    """
    Lập khuyến nghị cho một cảnh báo.

    Cảnh báo loại "both" chỉ nhận phần khuyến nghị của đại lượng được nhắc
    tới trong nội dung cảnh báo.

    Args:
        alert_type: Loại cảnh báo (temperature, ammonia, both, info, ...)
        message: Nội dung gốc của cảnh báo

    Returns:
        Advice gồm tiêu đề và các phần khuyến nghị
    """
    kind = (alert_type or "").lower()
    text = (message or "").lower()
    sections = []
    title = "Alert Analysis"

    if kind == "temperature" or (kind == "both" and "temperature" in text):
        title = "High Temperature Alert Analysis"
        sections.append(AdviceSection(intro=TEMPERATURE_INTRO, points=_points(TEMPERATURE_POINTS)))

    if kind == "ammonia" or (kind == "both" and "ammonia" in text):
        if sections:
            title = "High Temperature & Ammonia Alert Analysis"
            intro = "Additionally, for High Ammonia:"
        else:
            title = "High Ammonia Alert Analysis"
            intro = AMMONIA_INTRO
        sections.append(AdviceSection(intro=intro, points=_points(AMMONIA_POINTS)))

    if not sections and kind == "info":
        return Advice(title="Information", sections=[AdviceSection(intro=message)])
    if not sections:
        return Advice(
            title="General Alert Details",
            sections=[AdviceSection(
                intro="No specific prescriptive analysis for this alert type, but here's the information:",
                points=[{"title": "Alert", "text": message}]
            )]
        )

    return Advice(title=title, sections=sections)
