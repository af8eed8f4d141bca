"""Bundled demo listings.

Shown by the search client when the listing endpoint is unreachable, and
inserted by ``python -m app.seed`` to bootstrap an empty database. They do
not reflect live data.
"""
from app.schemas import ListingOut

DEMO_PROVIDER = {
    "id": "cmkglviwc0000bpn472qa95nl",
    "name": "Demo Provider",
    "email": "provider@example.com",
}

_AVAILABLE_FROM = "1970-01-01T00:00:00Z"

SAMPLE_RECORDS = [
    {
        "id": "cmkgmnvka000bbpn4qowlyq0y",
        "name": "市街地近くの畑",
        "prefecture": "埼玉県",
        "city": "さいたま市",
        "address": "見沼区3344",
        "area": 500,
        "price": 12000,
        "description": "アクセス良好な畑地です。",
        "latitude": 35.9,
        "longitude": 139.7,
        "images": [
            "/images/japanese-urban-vegetable-farm-field-city-nearby.jpg",
            "/images/japanese-farm-water-faucet-modern-facility.jpg",
        ],
        "facilities": {
            "shed": False, "toilet": True, "water": True, "electricity": True,
            "signal5g": True, "signal4g": True, "parking": True,
        },
    },
    {
        "id": "cmkgmnvk9000abpn4q91zb5de",
        "name": "山間部の段々畑",
        "prefecture": "新潟県",
        "city": "十日町市",
        "address": "松代1122",
        "area": 1500,
        "price": 6000,
        "description": "美しい棚田で伝統的な米作りを体験できます。",
        "latitude": 37.15,
        "longitude": 138.65,
        "images": [
            "/images/japanese-terraced-rice-field-mountains-beautiful-l.jpg",
            "/images/japanese-mountain-stream-water-source.jpg",
        ],
        "facilities": {
            "shed": True, "toilet": False, "water": True, "electricity": False,
            "signal5g": False, "signal4g": False, "parking": False,
        },
    },
    {
        "id": "cmkgmnvk90009bpn44tsug3ix",
        "name": "ビニールハウス付き農地",
        "prefecture": "静岡県",
        "city": "浜松市",
        "address": "引佐町910",
        "area": 2000,
        "price": 15000,
        "description": "イチゴ栽培の実績があり、設備もそのまま使用可能です。",
        "latitude": 34.85,
        "longitude": 137.75,
        "images": [
            "/images/japanese-vinyl-greenhouse-structure-farmland.jpg",
            "/images/inside-japanese-greenhouse-strawberry-cultivation.jpg",
        ],
        "facilities": {
            "shed": True, "toilet": True, "water": True, "electricity": True,
            "signal5g": False, "signal4g": True, "parking": True,
        },
    },
    {
        "id": "cmkgmnvk90008bpn45gcetyl2",
        "name": "有機栽培向け畑地",
        "prefecture": "千葉県",
        "city": "南房総市",
        "address": "白浜町5678",
        "area": 800,
        "price": 5000,
        "description": "温暖な気候で一年中栽培可能な畑地です。",
        "latitude": 34.9,
        "longitude": 139.95,
        "images": [
            "/images/japanese-organic-vegetable-farm-field-with-ocean-v.jpg",
            "/images/japanese-farm-toilet-facility-small-building.jpg",
        ],
        "facilities": {
            "shed": False, "toilet": True, "water": True, "electricity": True,
            "signal5g": True, "signal4g": True, "parking": True,
        },
    },
    {
        "id": "cmkgm2jd80002bpn42v0b8imy",
        "name": "日当たり良好な水田",
        "prefecture": "長野県",
        "city": "松本市",
        "address": "梓川梓1234-5",
        "area": 1200,
        "price": 8000,
        "description": "南向きで日当たり抜群の水田",
        "latitude": 36.2,
        "longitude": 137.97,
        "images": [
            "/images/japanese-countryside-road-next-to-farmland.jpg",
            "/images/japanese-farm-parking-area-gravel-lot.jpg",
        ],
        "facilities": {
            "shed": True, "toilet": False, "water": True, "electricity": False,
            "signal5g": False, "signal4g": True, "parking": True,
        },
    },
]

SAMPLE_LISTINGS = [
    ListingOut.model_validate(
        {
            **record,
            "availableFrom": _AVAILABLE_FROM,
            "availableTo": None,
            "status": "PUBLIC",
            "provider": DEMO_PROVIDER,
        }
    )
    for record in SAMPLE_RECORDS
]
