"""Garment types, their measurement fields, and order statuses."""
from __future__ import annotations


def _fields(*entries: tuple[str, str] | tuple[str, str, str]) -> list[dict]:
    fields = []
    for entry in entries:
        field_id, label = entry[0], entry[1]
        unit = entry[2] if len(entry) > 2 else "inch"
        fields.append({"id": field_id, "label": label, "unit": unit})
    return fields


GARMENT_TYPES: dict[str, dict] = {
    "kurti": {
        "name": "Kurti / Kameez / Top",
        "measurements": _fields(
            ("length", "Length (Full or Desired)"),
            ("bust", "Bust"),
            ("waist", "Waist"),
            ("hip", "Hip"),
            ("shoulder", "Shoulder"),
            ("armhole", "Armhole"),
            ("sleeve_length", "Sleeve Length"),
            ("sleeve_round", "Sleeve Round"),
            ("neck_depth_front", "Neck Depth (Front)"),
            ("neck_depth_back", "Neck Depth (Back)"),
            ("neck_width", "Neck Width"),
            ("side_slit_length", "Side Slit Length"),
            ("bottom_opening_round", "Bottom Opening Round"),
        ),
    },
    "salwar": {
        "name": "Salwar / Pant / Churidar",
        "measurements": _fields(
            ("waist", "Waist"),
            ("hip", "Hip"),
            ("thigh_round", "Thigh Round"),
            ("knee_round", "Knee Round"),
            ("calf_round", "Calf Round"),
            ("ankle_round", "Ankle Round"),
            ("inseam_length", "Inseam Length"),
            ("outseam_length", "Outseam Length"),
            ("salwar_belt_height", "Salwar Belt Height (Kamar Patti)"),
            ("ghera", "Ghera of Salwar / Hem Width"),
            ("churidar_length", "Churidar Length"),
            ("ankle_fit", "Ankle Fit"),
        ),
    },
    "blouse": {
        "name": "Blouse (Saree Blouse)",
        "measurements": _fields(
            ("bust", "Bust"),
            ("underbust", "Underbust"),
            ("waist", "Waist"),
            ("shoulder_width", "Shoulder Width"),
            ("neck_depth_front", "Neck Depth (Front)"),
            ("neck_depth_back", "Neck Depth (Back)"),
            ("neck_width", "Neck Width"),
            ("armhole", "Armhole"),
            ("sleeve_length", "Sleeve Length"),
            ("sleeve_round", "Sleeve Round"),
            ("blouse_length", "Blouse Length"),
            ("across_front", "Across Front"),
            ("across_back", "Across Back"),
            ("bust_point_distance", "Bust Point to Bust Point (Apex Distance)"),
            ("underbust_length", "Underbust Length"),
            ("back_opening_width", "Back Opening Width"),
            ("dori_length", "Dori Length (if needed)"),
        ),
    },
    "lehenga": {
        "name": "Lehenga / Skirt",
        "measurements": _fields(
            ("waist", "Waist"),
            ("hip", "Hip"),
            ("lehenga_length", "Lehenga Length"),
            ("bottom_ghera", "Bottom Ghera"),
            ("zip_preference", "Zip preference", "text"),
            ("can_can", "Can-can requirement", "boolean"),
        ),
    },
    "gown": {
        "name": "Gown / Anarkali",
        "measurements": _fields(
            ("full_length", "Full Length"),
            ("bust", "Bust"),
            ("waist", "Waist"),
            ("hip", "Hip"),
            ("shoulder", "Shoulder"),
            ("armhole", "Armhole"),
            ("sleeve_length", "Sleeve Length"),
            ("sleeve_round", "Sleeve Round"),
            ("neck_depth", "Neck Depth"),
            ("neck_width", "Neck Width"),
            ("yoke_length", "Yoke Length"),
            ("anarkali_ghera", "Anarkali Ghera (flare)"),
            ("upper_body_length", "Upper Body Length"),
        ),
    },
    "dress": {
        "name": "Dress / Western Wear",
        "measurements": _fields(
            ("full_length", "Full Length"),
            ("bust", "Bust"),
            ("waist", "Waist"),
            ("hip", "Hip"),
            ("shoulder_width", "Shoulder Width"),
            ("armhole", "Armhole"),
            ("sleeve_length", "Sleeve Length"),
            ("sleeve_round", "Sleeve Round"),
            ("neck_depth", "Neck Depth"),
            ("neck_width", "Neck Width"),
        ),
    },
    "other": {
        "name": "Other",
        "measurements": _fields(
            ("custom_measurement_1", "Custom Measurement 1"),
            ("custom_measurement_2", "Custom Measurement 2"),
            ("custom_measurement_3", "Custom Measurement 3"),
            ("notes", "Additional Notes", "text"),
        ),
    },
}

ADDITIONAL_MEASUREMENTS = _fields(
    ("torso_length", "Torso Length"),
    ("waist_position", "Waist Position (High/Mid/Low)", "text"),
    ("body_height", "Body Height"),
    ("bust_round_ease", "Bust Round with Ease"),
    ("maternity_ease", "Maternity Ease Allowance"),
    ("jumpsuit_crotch_length", "Jumpsuit Crotch Length"),
)

ORDER_STATUSES = [
    {"value": "pending", "label": "Pending"},
    {"value": "in_progress", "label": "In Progress"},
    {"value": "ready", "label": "Ready"},
    {"value": "delivered", "label": "Delivered"},
    {"value": "cancelled", "label": "Cancelled"},
]

DEFAULT_STATUS = "pending"


def is_valid_status(status: str) -> bool:
    return any(item["value"] == status for item in ORDER_STATUSES)


def garment_name(garment_id: str) -> str:
    garment = GARMENT_TYPES.get(garment_id)
    return garment["name"] if garment else garment_id


def catalog_payload() -> dict:
    return {
        "garment_types": GARMENT_TYPES,
        "additional_measurements": ADDITIONAL_MEASUREMENTS,
        "order_statuses": ORDER_STATUSES,
    }
