"""Reporting service for patient reports and the practice dashboard."""

import calendar
from collections import Counter
from dataclasses import asdict, dataclass
from datetime import UTC, datetime, timedelta

from ayur_diet_tracker.domain.compliance import ComplianceRecord, DayScore, Trend
from ayur_diet_tracker.domain.diet_charts import DietChartRecord, MealRecord
from ayur_diet_tracker.domain.patients import PatientRecord, analyze_bmi
from ayur_diet_tracker.errors import NotFoundError
from ayur_diet_tracker.services.compliance import ComplianceRepository
from ayur_diet_tracker.services.compliance_analytics import (
    recent_window_trend,
    summarize,
)
from ayur_diet_tracker.services.diet_charts import DietChartRepository
from ayur_diet_tracker.services.patients import PatientRepository
from ayur_diet_tracker.services.validation import require_date_range

LOW_COMPLIANCE = 70
GOOD_COMPLIANCE = 80
DASHBOARD_PERIODS = ("week", "month", "quarter", "year")
DOSHA_TIPS = {
    "Vata": "Focus on warm, cooked foods and regular meal times",
    "Pitta": "Emphasize cooling foods and avoid excessive spicy meals",
    "Kapha": "Include more stimulating spices and lighter meals",
}


@dataclass
class ReportService:
    """Builds patient progress reports and dashboard statistics."""

    patient_repository: PatientRepository
    chart_repository: DietChartRepository
    compliance_repository: ComplianceRepository

    def patient_report(
        self,
        patient_id: int,
        *,
        start_date: str | None = None,
        end_date: str | None = None,
        include_meals: bool = False,
    ) -> dict[str, object]:
        """Return a full progress report for one patient."""
        require_date_range(start_date, end_date)
        patient = self.patient_repository.get_patient(patient_id)
        if patient is None:
            raise NotFoundError("Patient not found", "PATIENT_NOT_FOUND")

        charts = self.chart_repository.list_charts_for_patient(
            patient_id, start_date or None, end_date or None
        )
        records = self.compliance_repository.list_records_for_patient(
            patient_id, start_date or None, end_date or None
        )
        compliance = _compliance_analysis(records)
        meal_patterns = None
        if include_meals and charts:
            meal_patterns = self._meal_patterns([chart.id for chart in charts])

        recommendations = _recommendations(patient, compliance)
        return {
            "patient_overview": _patient_overview(patient, charts, records, compliance),
            "diet_chart_history": _chart_history(charts),
            "compliance_analysis": compliance,
            "meal_pattern_analysis": meal_patterns,
            "recommendations": {
                "total": len(recommendations),
                "high_priority": sum(
                    1 for item in recommendations if item["priority"] == "high"
                ),
                "suggestions": recommendations,
            },
            "report_metadata": {
                "generated_at": datetime.now(tz=UTC).isoformat(),
                "period": {
                    "start_date": start_date or "All time",
                    "end_date": end_date or "All time",
                },
                "includes_meals": include_meals,
            },
        }

    def dashboard(
        self, period: str | None = None, now: datetime | None = None
    ) -> dict[str, object]:
        """Return practice-wide statistics for the requested period."""
        period = period if period in DASHBOARD_PERIODS else "month"
        now = now or datetime.now(tz=UTC)
        period_start = _period_start(period, now).isoformat()
        week_start = (now - timedelta(days=7)).isoformat()
        last_week_start = (now - timedelta(days=14)).isoformat()

        patients = self.patient_repository.list_all_patients()
        charts = self.chart_repository.list_all_charts()
        records = self.compliance_repository.list_all_records()

        this_week = _average_percentage(
            [record for record in records if record.created_at >= week_start]
        )
        last_week = _average_percentage(
            [
                record
                for record in records
                if last_week_start <= record.created_at < week_start
            ]
        )
        durations = [chart.duration for chart in charts if chart.duration is not None]

        return {
            "patient_statistics": {
                "total_patients": len(patients),
                "active_patients": sum(1 for p in patients if p.status == "Active"),
                "patients_by_dosha": dict(Counter(p.dosha for p in patients)),
                "new_patients_this_month": sum(
                    1 for p in patients if p.created_at >= period_start
                ),
            },
            "diet_chart_statistics": {
                "total_diet_charts": len(charts),
                "active_diet_charts": sum(1 for c in charts if c.status == "Active"),
                "charts_by_focus": dict(
                    Counter(c.dietary_focus for c in charts if c.dietary_focus)
                ),
                "average_duration": _round2(_mean(durations)),
            },
            "compliance_statistics": {
                "overall_compliance_rate": _round2(_average_percentage(records)),
                "compliance_this_week": _round2(this_week),
                "patients_with_good_compliance": _good_compliance_count(records),
                "compliance_trend": _round2(this_week - last_week),
            },
            "recent_activity": {
                "recent_patients": [
                    {
                        "id": p.id,
                        "name": p.name,
                        "dosha": p.dosha,
                        "status": p.status,
                        "created_at": p.created_at,
                    }
                    for p in _newest(patients, 5)
                ],
                "recent_diet_charts": [
                    {
                        "id": c.id,
                        "patient_id": c.patient_id,
                        "dietary_focus": c.dietary_focus,
                        "status": c.status,
                        "created_at": c.created_at,
                    }
                    for c in _newest(charts, 5)
                ],
                "recent_compliance": [
                    {
                        "id": r.id,
                        "patient_id": r.patient_id,
                        "compliance_percentage": r.compliance_percentage,
                        "date": r.date,
                        "created_at": r.created_at,
                    }
                    for r in _newest(records, 10)
                ],
            },
            "health_insights": _health_insights(patients),
            "period": period,
            "generated_at": now.isoformat(),
        }

    def _meal_patterns(self, chart_ids: list[int]) -> dict[str, object]:
        meals = self.chart_repository.list_meals(chart_ids)
        foods = self.chart_repository.list_meal_foods([meal.id for meal in meals])
        totals = {"protein": 0.0, "carbs": 0.0, "fat": 0.0, "calories": 0.0}
        for food in foods:
            for key in totals:
                totals[key] += getattr(food, key) or 0
        return {
            "total_meals": len(meals),
            "meal_type_distribution": dict(
                Counter(meal.meal_type or "unknown" for meal in meals)
            ),
            "average_calories_per_meal": _round2(_average_calories(meals)),
            "nutritional_patterns": {
                **{f"total_{key}": _round2(value) for key, value in totals.items()},
                "thermal_properties": dict(
                    Counter(f.thermal_property for f in foods if f.thermal_property)
                ),
                "rasa_distribution": dict(Counter(f.rasa for f in foods if f.rasa)),
            },
        }


def _compliance_analysis(records: list[ComplianceRecord]) -> dict[str, object] | None:
    if not records:
        return None
    entries = [record.to_entry() for record in records]
    summary = summarize(entries)
    return {
        "overall_compliance": summary.average_compliance,
        "total_records": summary.total_records,
        "best_period": _period(summary.best_day),
        "worst_period": _period(summary.worst_day),
        "trend": recent_window_trend(entries),
        "compliance_history": [
            {
                "date": record.date,
                "compliance": record.compliance_percentage,
                "meals_followed": record.meals_followed,
                "meals_total": record.meals_total,
            }
            for record in records
        ],
    }


def _period(day: DayScore | None) -> dict[str, object] | None:
    if day is None:
        return None
    return {"date": day.date, "compliance": day.compliance_percentage}


def _patient_overview(
    patient: PatientRecord,
    charts: list[DietChartRecord],
    records: list[ComplianceRecord],
    compliance: dict[str, object] | None,
) -> dict[str, object]:
    bmi = analyze_bmi(patient.height, patient.weight)
    return {
        "id": patient.id,
        "name": patient.name,
        "age": patient.age,
        "gender": patient.gender,
        "dosha": patient.dosha,
        "phone": patient.phone,
        "email": patient.email,
        "bmi_analysis": asdict(bmi) if bmi else None,
        "dietary_habits": patient.dietary_habits,
        "meal_frequency": patient.meal_frequency,
        "water_intake": patient.water_intake,
        "health_conditions": patient.health_conditions,
        "allergies": patient.allergies,
        "status": patient.status,
        "health_assessment": {
            "total_diet_charts": len(charts),
            "compliance_records": len(records),
            "average_compliance": compliance["overall_compliance"]
            if compliance
            else None,
        },
    }


def _chart_history(charts: list[DietChartRecord]) -> dict[str, object]:
    def average(key: str) -> float | None:
        if not charts:
            return None
        return _round2(sum(getattr(chart, key) or 0 for chart in charts) / len(charts))

    return {
        "total_charts": len(charts),
        "progression": [
            {
                "id": chart.id,
                "created_at": chart.created_at,
                "duration": chart.duration,
                "target_calories": chart.target_calories,
                "dietary_focus": chart.dietary_focus,
                "dosha_balance_score": chart.dosha_balance_score,
                "rasa_score": chart.rasa_score,
                "digestibility_score": chart.digestibility_score,
                "status": chart.status,
            }
            for chart in charts
        ],
        "effectiveness_analysis": {
            "average_dosha_score": average("dosha_balance_score"),
            "average_rasa_score": average("rasa_score"),
            "average_digestibility_score": average("digestibility_score"),
        },
    }


def _recommendations(
    patient: PatientRecord, compliance: dict[str, object] | None
) -> list[dict[str, str]]:
    items = []
    if compliance:
        if compliance["overall_compliance"] < LOW_COMPLIANCE:
            items.append(
                {
                    "category": "compliance",
                    "priority": "high",
                    "message": "Consider simplifying the diet plan to improve adherence",
                    "suggestion": "Focus on 2-3 key meals per day initially",
                }
            )
        if compliance["trend"] == Trend.DECLINING:
            items.append(
                {
                    "category": "compliance",
                    "priority": "medium",
                    "message": "Compliance is declining - schedule a consultation",
                    "suggestion": "Review current challenges and adjust plan accordingly",
                }
            )
    tip = DOSHA_TIPS.get(patient.dosha)
    if tip:
        items.append(
            {
                "category": "dosha",
                "priority": "medium",
                "message": f"{patient.dosha} balancing",
                "suggestion": tip,
            }
        )
    return items


def _health_insights(patients: list[PatientRecord]) -> dict[str, object]:
    conditions: Counter[str] = Counter()
    for patient in patients:
        for condition in (patient.health_conditions or "").split(","):
            if condition.strip():
                conditions[condition.strip()] += 1

    bmi_by_dosha: dict[str, list[float]] = {}
    for patient in patients:
        if patient.bmi is not None:
            bmi_by_dosha.setdefault(patient.dosha, []).append(patient.bmi)

    return {
        "common_health_conditions": dict(conditions),
        "dietary_habits_distribution": dict(
            Counter(p.dietary_habits for p in patients if p.dietary_habits)
        ),
        "average_bmi_by_dosha": {
            dosha: _round2(_mean(values)) for dosha, values in bmi_by_dosha.items()
        },
    }


def _good_compliance_count(records: list[ComplianceRecord]) -> int:
    by_patient: dict[int, list[ComplianceRecord]] = {}
    for record in records:
        if record.patient_id is not None:
            by_patient.setdefault(record.patient_id, []).append(record)
    return sum(
        1
        for patient_records in by_patient.values()
        if _average_percentage(patient_records) > GOOD_COMPLIANCE
    )


def _period_start(period: str, now: datetime) -> datetime:
    if period == "week":
        return now - timedelta(days=7)
    if period == "year":
        return _shift_months(now, -12)
    if period == "quarter":
        return _shift_months(now, -3)
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def _shift_months(moment: datetime, months: int) -> datetime:
    index = moment.year * 12 + moment.month - 1 + months
    year, month = divmod(index, 12)
    last_day = calendar.monthrange(year, month + 1)[1]
    return moment.replace(
        year=year,
        month=month + 1,
        day=min(moment.day, last_day),
        hour=0,
        minute=0,
        second=0,
        microsecond=0,
    )


def _average_percentage(records: list[ComplianceRecord]) -> float:
    return _mean(
        [
            record.compliance_percentage
            for record in records
            if record.compliance_percentage is not None
        ]
    )


def _average_calories(meals: list[MealRecord]) -> float:
    if not meals:
        return 0
    return sum(meal.total_calories or 0 for meal in meals) / len(meals)


def _newest(items: list, limit: int) -> list:
    return sorted(items, key=lambda item: item.created_at, reverse=True)[:limit]


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0


def _round2(value: float) -> float:
    return round(value, 2)
