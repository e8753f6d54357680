"""
Threshold-driven, localized recommendations derived from risk metrics.
"""

import math
from typing import Dict, List

from ..models import Recommendation, RiskMetrics, SimulationStatistics

LOW_SUCCESS_THRESHOLD = 0.70
HIGH_SUCCESS_THRESHOLD = 0.90
HIGH_DRAWDOWN_THRESHOLD = 0.40
SHORTFALL_THRESHOLD = 0.20


CONTENT: Dict[str, Dict[str, Dict[str, str]]] = {
    "en": {
        "low_success": {
            "title": "Low Retirement Success Probability",
            "description": "Only {probability}% chance of meeting retirement income goals",
            "increase_contributions": "Increase monthly savings contributions",
            "extend_working_years": "Consider working 2-3 additional years",
            "increase_risk": "Consider higher-return investments",
            "reduce_expenses": "Review and reduce retirement expense targets",
        },
        "high_success": {
            "title": "High Retirement Success Probability",
            "description": "{probability}% chance of exceeding retirement goals",
            "reduce_risk": "Consider reducing portfolio risk",
            "retire_earlier": "You may be able to retire earlier",
            "increase_lifestyle": "Consider upgrading retirement lifestyle plans",
        },
        "high_drawdown": {
            "title": "High Portfolio Drawdown Risk",
            "description": "90% chance of experiencing {drawdown}% portfolio decline",
            "diversify": "Improve portfolio diversification",
            "reduce_bonds": "Consider reducing bond allocation during accumulation",
            "add_alternatives": "Add alternative investments for stability",
        },
        "shortfall": {
            "title": "Significant Shortfall Risk",
            "description": "Average income shortfall of {shortfall}% in worst scenarios",
            "review_targets": "Review retirement income targets",
            "boost_savings": "Significantly boost monthly savings",
            "optimize_allocation": "Optimize asset allocation for better risk-adjusted returns",
        },
    },
    "he": {
        "low_success": {
            "title": "הסתברות נמוכה להצלחה בפרישה",
            "description": "רק {probability}% סיכוי לעמוד ביעדי הכנסה בפרישה",
            "increase_contributions": "הגדל הפקדות חודשיות",
            "extend_working_years": "שקול עבודה 2-3 שנים נוספות",
            "increase_risk": "שקול השקעות עם תשואה גבוהה יותר",
            "reduce_expenses": "סקור והקטן יעדי הוצאות פרישה",
        },
        "high_success": {
            "title": "הסתברות גבוהה להצלחה בפרישה",
            "description": "{probability}% סיכוי לחרוג מיעדי הפרישה",
            "reduce_risk": "שקול הפחתת סיכון התיק",
            "retire_earlier": "תוכל לפרוש מוקדם יותר",
            "increase_lifestyle": "שקול שיפור תוכניות אורח חיים בפרישה",
        },
        "high_drawdown": {
            "title": "סיכון גבוה לירידת תיק",
            "description": "90% סיכוי לחוות ירידה של {drawdown}% בתיק",
            "diversify": "שפר פיזור תיק ההשקעות",
            "reduce_bonds": "שקול הפחתת הקצאת אג״ח בתקופת צבירה",
            "add_alternatives": "הוסף השקעות אלטרנטיביות ליציבות",
        },
        "shortfall": {
            "title": "סיכון מחסור משמעותי",
            "description": "מחסור הכנסה ממוצע של {shortfall}% בתרחישים גרועים",
            "review_targets": "סקור יעדי הכנסה בפרישה",
            "boost_savings": "הגדל משמעותית חיסכון חודשי",
            "optimize_allocation": "אופטם הקצאת נכסים לתשואה מותאמת סיכון טובה יותר",
        },
    },
}


def get_content(language: str) -> Dict[str, Dict[str, str]]:
    """Message table for ``language``; anything but Hebrew gets English."""
    return CONTENT["he"] if language == "he" else CONTENT["en"]


def _as_percent(fraction: float) -> int:
    # round half up, as the UI displays it
    return int(math.floor(fraction * 100 + 0.5))


def generate_recommendations(statistics: SimulationStatistics, risk_metrics: RiskMetrics,
                             language: str = "en") -> List[Recommendation]:
    """
    Build recommendations in a fixed check order: success probability,
    drawdown, then shortfall. Several may fire for the same run.
    """
    content = get_content(language)
    recommendations: List[Recommendation] = []

    success = risk_metrics.success_probability
    if success < LOW_SUCCESS_THRESHOLD:
        c = content["low_success"]
        recommendations.append(Recommendation(
            type="low_success_probability",
            priority="high",
            title=c["title"],
            description=c["description"].format(probability=_as_percent(success)),
            actions=[
                c["increase_contributions"],
                c["extend_working_years"],
                c["increase_risk"],
                c["reduce_expenses"],
            ],
        ))
    elif success > HIGH_SUCCESS_THRESHOLD:
        c = content["high_success"]
        recommendations.append(Recommendation(
            type="high_success_probability",
            priority="low",
            title=c["title"],
            description=c["description"].format(probability=_as_percent(success)),
            actions=[c["reduce_risk"], c["retire_earlier"], c["increase_lifestyle"]],
        ))

    p90_drawdown = statistics.drawdown.percentiles["p90"]
    if p90_drawdown > HIGH_DRAWDOWN_THRESHOLD:
        c = content["high_drawdown"]
        recommendations.append(Recommendation(
            type="high_drawdown_risk",
            priority="medium",
            title=c["title"],
            description=c["description"].format(drawdown=_as_percent(p90_drawdown)),
            actions=[c["diversify"], c["reduce_bonds"], c["add_alternatives"]],
        ))

    if risk_metrics.average_shortfall > SHORTFALL_THRESHOLD:
        c = content["shortfall"]
        recommendations.append(Recommendation(
            type="shortfall_risk",
            priority="high",
            title=c["title"],
            description=c["description"].format(shortfall=_as_percent(risk_metrics.average_shortfall)),
            actions=[c["review_targets"], c["boost_savings"], c["optimize_allocation"]],
        ))

    return recommendations
