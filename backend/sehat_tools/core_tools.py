from __future__ import annotations

import asyncio
from typing import Any

from sehat_agent_core.models import ToolContext
from sehat_agent_core.registry import ToolDefinition, ToolRegistry
from storage.session_store import SessionStore

from .facility_lookup import FacilityLookup

MAX_HISTORY_LIMIT = 20

FACILITY_MAP: dict[str, dict[str, str]] = {
    "general physician": {
        "facility_level": "PHC",
        "available_at": "Primary Health Centre (PHC) or above",
        "alternative_if_unavailable": "Any pharmacy with a licensed medical practitioner",
    },
    "cardiologist": {
        "facility_level": "District Hospital",
        "available_at": "District Hospital or Tertiary Care Centre",
        "alternative_if_unavailable": "General physician at CHC with ECG facility",
    },
    "neurologist": {
        "facility_level": "District Hospital",
        "available_at": "District Hospital or Medical College Hospital",
        "alternative_if_unavailable": "General physician at CHC, refer to district if needed",
    },
    "pulmonologist": {
        "facility_level": "District Hospital",
        "available_at": "District Hospital or Chest Hospital",
        "alternative_if_unavailable": "General physician at CHC with chest X-ray facility",
    },
    "gastroenterologist": {
        "facility_level": "District Hospital",
        "available_at": "District Hospital or Tertiary Care Centre",
        "alternative_if_unavailable": "General physician at CHC with ultrasound facility",
    },
    "orthopedic": {
        "facility_level": "CHC",
        "available_at": "Community Health Centre (CHC) or District Hospital",
        "alternative_if_unavailable": "PHC for first aid, then refer to CHC",
    },
    "dermatologist": {
        "facility_level": "District Hospital",
        "available_at": "District Hospital or urban clinic",
        "alternative_if_unavailable": "General physician at PHC for common skin conditions",
    },
    "gynecologist": {
        "facility_level": "CHC",
        "available_at": "Community Health Centre (CHC) or above, JSSK covers delivery",
        "alternative_if_unavailable": "ANM/ASHA worker for basic guidance, refer to CHC",
    },
    "pediatrician": {
        "facility_level": "CHC",
        "available_at": "Community Health Centre (CHC) or District Hospital",
        "alternative_if_unavailable": "PHC medical officer with pediatric training",
    },
    "psychiatrist": {
        "facility_level": "District Hospital",
        "available_at": "District Mental Health Programme (DMHP) centre or tertiary hospital",
        "alternative_if_unavailable": "Tele-MANAS helpline: 14416 or 1800-891-4416",
    },
    "ent specialist": {
        "facility_level": "District Hospital",
        "available_at": "District Hospital or above",
        "alternative_if_unavailable": "General physician at CHC",
    },
    "ophthalmologist": {
        "facility_level": "District Hospital",
        "available_at": "District Hospital or Vision Centre",
        "alternative_if_unavailable": "NPCB eye camp or mobile vision screening",
    },
    "endocrinologist": {
        "facility_level": "Tertiary",
        "available_at": "Medical College Hospital or Tertiary Centre",
        "alternative_if_unavailable": "General physician at District Hospital for diabetes/thyroid management",
    },
    "urologist": {
        "facility_level": "District Hospital",
        "available_at": "District Hospital or Tertiary Centre",
        "alternative_if_unavailable": "General physician at CHC for initial evaluation",
    },
}

EMERGENCY_FACILITY = {
    "facility_level": "Tertiary / Emergency",
    "available_at": "Nearest hospital with emergency department, call 108 ambulance",
    "alternative_if_unavailable": "Any nearby hospital, then transfer. Call 112 for help.",
}

HEALTH_SCHEMES: tuple[dict[str, Any], ...] = (
    {
        "name": "Ayushman Bharat - Pradhan Mantri Jan Arogya Yojana (PM-JAY)",
        "coverage": "Up to Rs 5 lakh per family per year for secondary and tertiary hospitalization",
        "eligibility": "Bottom 40% of population (SECC 2011). No age limit. Pre-existing conditions covered from day one.",
        "how_to_access": "Visit any empaneled hospital with Aadhaar card. Check eligibility at mera.pmjay.gov.in or call 14555.",
        "care_levels": {"district_hospital", "emergency"},
        "condition_types": {"all"},
    },
    {
        "name": "Janani Suraksha Yojana (JSY)",
        "coverage": "Cash assistance for institutional delivery: Rs 1400 (rural) / Rs 1000 (urban)",
        "eligibility": "All pregnant women from BPL families. SC/ST women in all categories.",
        "how_to_access": "Register with ANM/ASHA worker during pregnancy. Benefit given at government hospital after delivery.",
        "care_levels": {"phc", "district_hospital", "emergency"},
        "condition_types": {"maternal", "pregnancy", "delivery"},
    },
    {
        "name": "Janani Shishu Suraksha Karyakram (JSSK)",
        "coverage": "Free delivery, C-section, drugs, diagnostics, blood, diet and transport",
        "eligibility": "All pregnant women and sick newborns (up to 30 days) at public health facilities",
        "how_to_access": "Go to any government hospital. No payment required. Free ambulance: call 102 or 108.",
        "care_levels": {"phc", "district_hospital", "emergency"},
        "condition_types": {"maternal", "pregnancy", "delivery", "neonatal", "infant"},
    },
    {
        "name": "Rashtriya Bal Swasthya Karyakram (RBSK)",
        "coverage": "Free screening and management of defects, deficiencies, diseases and development delays",
        "eligibility": "All children 0-18 years",
        "how_to_access": "Mobile health teams visit Anganwadi centres and schools. District Early Intervention Centre for referrals.",
        "care_levels": {"phc", "district_hospital"},
        "condition_types": {"pediatric", "child", "developmental"},
    },
    {
        "name": "National Programme for Prevention and Control of Cancer, Diabetes, CVD and Stroke (NPCDCS)",
        "coverage": "Free screening, diagnosis and treatment at NCD clinics in district hospitals",
        "eligibility": "All citizens above 30 years for screening.",
        "how_to_access": "Visit NCD clinic at district hospital. Population-based screening at PHC/CHC.",
        "care_levels": {"phc", "district_hospital", "emergency"},
        "condition_types": {"cardiac", "diabetes", "cancer", "stroke", "hypertension"},
    },
    {
        "name": "National Mental Health Programme (NMHP) / District Mental Health Programme",
        "coverage": "Free psychiatric OPD, medicines and counseling at district hospitals",
        "eligibility": "All citizens. No income criteria.",
        "how_to_access": "Visit DMHP clinic at district hospital. Tele-MANAS helpline: 14416 / 1800-891-4416.",
        "care_levels": {"district_hospital"},
        "condition_types": {"mental health", "psychiatric", "depression", "anxiety"},
    },
    {
        "name": "National Tuberculosis Elimination Programme (NTEP)",
        "coverage": "Free TB diagnosis, full treatment course and Rs 500/month nutrition support",
        "eligibility": "All TB patients. No income criteria.",
        "how_to_access": "Visit nearest government health facility. Register on the Nikshay portal.",
        "care_levels": {"phc", "district_hospital"},
        "condition_types": {"tuberculosis", "tb", "respiratory", "cough"},
    },
    {
        "name": "Pradhan Mantri Surakshit Matritva Abhiyan (PMSMA)",
        "coverage": "Free antenatal checkup on the 9th of every month at government facilities",
        "eligibility": "All pregnant women (2nd and 3rd trimester)",
        "how_to_access": "Visit PHC/CHC/District Hospital on the 9th of any month. No appointment needed.",
        "care_levels": {"phc", "district_hospital"},
        "condition_types": {"maternal", "pregnancy"},
    },
)


def _safe_int(value: Any, default: int) -> int:
    try:
        if value is None or isinstance(value, bool):
            return default
        return int(value)
    except (TypeError, ValueError):
        return default


def _safe_float(value: Any) -> float | None:
    try:
        if value is None or isinstance(value, bool):
            return None
        return float(value)
    except (TypeError, ValueError):
        return None


def facility_for_specialist(specialist: str, severity: str) -> dict[str, str]:
    if severity == "emergency":
        return dict(EMERGENCY_FACILITY)
    specialist = specialist.strip().lower()
    if specialist:
        for key, value in FACILITY_MAP.items():
            if key in specialist or specialist in key:
                return dict(value)
    return dict(FACILITY_MAP["general physician"])


def applicable_schemes(care_level: str, condition_type: str) -> list[dict[str, str]]:
    condition_type = condition_type.strip().lower()
    matches = []
    for scheme in HEALTH_SCHEMES:
        if care_level not in scheme["care_levels"]:
            continue
        conditions = scheme["condition_types"]
        if "all" not in conditions and not (
            condition_type and any(item in condition_type or condition_type in item for item in conditions)
        ):
            continue
        matches.append({key: scheme[key] for key in ("name", "coverage", "eligibility", "how_to_access")})
    return matches


class SehatToolset:
    def __init__(self, session_store: SessionStore | None, facilities: FacilityLookup | None = None) -> None:
        self.session_store = session_store
        self.facilities = facilities or FacilityLookup()

    async def find_nearby_hospitals(self, ctx: ToolContext, payload: dict[str, Any]) -> dict[str, Any]:
        location = ctx.location
        return await self.facilities.nearby(
            lat=location.lat if location else None,
            lng=location.lng if location else None,
            care_level=str(payload.get("care_level") or "hospital"),
            radius_km=_safe_float(payload.get("radius_km")),
        )

    async def get_facility_type(self, ctx: ToolContext, payload: dict[str, Any]) -> dict[str, Any]:
        return facility_for_specialist(str(payload.get("specialist") or ""), str(payload.get("severity") or ""))

    async def get_patient_history(self, ctx: ToolContext, payload: dict[str, Any]) -> dict[str, Any]:
        if self.session_store is None or not ctx.user_id:
            return {"sessions": [], "total_sessions": 0, "note": "No stored history is available."}
        limit = max(1, min(_safe_int(payload.get("limit"), 10), MAX_HISTORY_LIMIT))
        sessions = await asyncio.to_thread(self.session_store.recent_sessions, ctx.user_id, limit=limit)
        for session in sessions:
            session.pop("session_id", None)
        return {"sessions": sessions, "total_sessions": len(sessions)}

    async def get_health_schemes(self, ctx: ToolContext, payload: dict[str, Any]) -> dict[str, Any]:
        care_level = str(payload.get("care_level") or "")
        return {"applicable_schemes": applicable_schemes(care_level, str(payload.get("condition_type") or ""))}


def register_tools(registry: ToolRegistry, toolset: SehatToolset) -> None:
    registry.register(
        ToolDefinition(
            "find_nearby_hospitals",
            "Find real hospitals and clinics near the patient's location with distances and Google Maps "
            "directions. Only call this when the patient's location is available.",
            toolset.find_nearby_hospitals,
            input_schema={
                "type": "object",
                "properties": {
                    "care_level": {"type": "string", "enum": ["phc", "clinic", "hospital", "emergency"]},
                    "radius_km": {"type": "number", "description": "Search radius in km (default 10, max 50)"},
                },
                "required": ["care_level"],
            },
        )
    )
    registry.register(
        ToolDefinition(
            "get_facility_type",
            "Map a specialist recommendation to the Indian facility tier (PHC, CHC, District Hospital, "
            "Tertiary) where that specialist is available.",
            toolset.get_facility_type,
            input_schema={
                "type": "object",
                "properties": {
                    "specialist": {"type": "string"},
                    "severity": {"type": "string", "enum": ["emergency", "urgent", "routine", "self_care"]},
                },
                "required": ["specialist", "severity"],
            },
        )
    )
    registry.register(
        ToolDefinition(
            "get_patient_history",
            "Fetch this patient's past triage sessions (severity, symptoms, summary, date) to spot "
            "recurring or escalating problems.",
            toolset.get_patient_history,
            input_schema={
                "type": "object",
                "properties": {"limit": {"type": "number", "description": "Max sessions (default 10)"}},
                "required": [],
            },
            requires_identity=True,
        )
    )
    registry.register(
        ToolDefinition(
            "get_health_schemes",
            "List Indian government health schemes that may cover treatment at the given care level.",
            toolset.get_health_schemes,
            input_schema={
                "type": "object",
                "properties": {
                    "care_level": {"type": "string", "enum": ["home", "phc", "district_hospital", "emergency"]},
                    "condition_type": {"type": "string"},
                },
                "required": ["care_level", "condition_type"],
            },
        )
    )
    registry.add_alias("get_indian_health_schemes", "get_health_schemes")
