from __future__ import annotations

from typing import Any

# Each entry: slug, display name, district, (lat, lng), tags, declared road edges (slug, km).
AREA_CATALOG: list[dict[str, Any]] = [
    {"slug": "tinkune", "name": "Tinkune", "district": "Kathmandu", "coordinates": (27.6889, 85.3495),
     "tags": ["transport", "gateway"],
     "neighbors": [("koteshwor", 1.3), ("baneshwor", 1.6), ("sinamangal", 2.1)]},
    {"slug": "koteshwor", "name": "Koteshwor", "district": "Kathmandu", "coordinates": (27.6754, 85.3494),
     "tags": ["residential", "commercial"],
     "neighbors": [("tinkune", 1.3), ("balkumari", 1.7), ("baneshwor", 2.4)]},
    {"slug": "baneshwor", "name": "New Baneshwor", "district": "Kathmandu", "coordinates": (27.6924, 85.3376),
     "tags": ["business", "residential"],
     "neighbors": [("tinkune", 1.6), ("putalisadak", 2.2), ("maitighar", 1.3), ("jawalakhel", 3.4)]},
    {"slug": "maitighar", "name": "Maitighar", "district": "Kathmandu", "coordinates": (27.6893, 85.3244),
     "tags": ["government"],
     "neighbors": [("baneshwor", 1.3), ("putalisadak", 1.2), ("tripureshwor", 1.1)]},
    {"slug": "putalisadak", "name": "Putalisadak", "district": "Kathmandu", "coordinates": (27.7056, 85.3206),
     "tags": ["education", "business"],
     "neighbors": [("maitighar", 1.2), ("thamel", 1.8), ("tripureshwor", 1.5), ("durbarmarg", 1.1)]},
    {"slug": "durbarmarg", "name": "Durbar Marg", "district": "Kathmandu", "coordinates": (27.7121, 85.3152),
     "tags": ["premium", "tourism"],
     "neighbors": [("putalisadak", 1.1), ("thamel", 0.9), ("lazimpat", 1.2)]},
    {"slug": "thamel", "name": "Thamel", "district": "Kathmandu", "coordinates": (27.7154, 85.3123),
     "tags": ["tourism", "hospitality"],
     "neighbors": [("durbarmarg", 0.9), ("putalisadak", 1.8), ("lazimpat", 1.4), ("swayambhu", 2.2)]},
    {"slug": "lazimpat", "name": "Lazimpat", "district": "Kathmandu", "coordinates": (27.7206, 85.3212),
     "tags": ["embassy", "residential"],
     "neighbors": [("thamel", 1.4), ("durbarmarg", 1.2), ("maharajgunj", 2.3)]},
    {"slug": "maharajgunj", "name": "Maharajgunj", "district": "Kathmandu", "coordinates": (27.7402, 85.3308),
     "tags": ["medical", "residential"],
     "neighbors": [("lazimpat", 2.3), ("baluwatar", 1.1), ("basundhara", 1.9)]},
    {"slug": "baluwatar", "name": "Baluwatar", "district": "Kathmandu", "coordinates": (27.7281, 85.3323),
     "tags": ["government"],
     "neighbors": [("maharajgunj", 1.1), ("baneshwor", 3.8), ("lazimpat", 1.5)]},
    {"slug": "jawalakhel", "name": "Jawalakhel", "district": "Lalitpur", "coordinates": (27.6731, 85.3156),
     "tags": ["residential", "lifestyle"],
     "neighbors": [("lalitpur", 1.4), ("sanepa", 1.2), ("baneshwor", 3.4)]},
    {"slug": "lalitpur", "name": "Patan Durbar Square", "district": "Lalitpur", "coordinates": (27.6722, 85.3250),
     "tags": ["heritage", "tourism"],
     "neighbors": [("jawalakhel", 1.4), ("kupondole", 1.6), ("sanepa", 1.1)]},
    {"slug": "sanepa", "name": "Sanepa", "district": "Lalitpur", "coordinates": (27.6835, 85.3075),
     "tags": ["residential", "cafes"],
     "neighbors": [("jawalakhel", 1.2), ("lalitpur", 1.1), ("kupondole", 1.4), ("tripureshwor", 2.2)]},
    {"slug": "kupondole", "name": "Kupondole", "district": "Lalitpur", "coordinates": (27.6869, 85.3177),
     "tags": ["business", "restaurants"],
     "neighbors": [("sanepa", 1.4), ("tripureshwor", 1.3), ("lalitpur", 1.6)]},
    {"slug": "tripureshwor", "name": "Tripureshwor", "district": "Kathmandu", "coordinates": (27.6938, 85.3119),
     "tags": ["stadium", "commercial"],
     "neighbors": [("maitighar", 1.1), ("putalisadak", 1.5), ("sanepa", 2.2), ("kalimati", 1.4)]},
    {"slug": "kalimati", "name": "Kalimati", "district": "Kathmandu", "coordinates": (27.6934, 85.3008),
     "tags": ["market"],
     "neighbors": [("tripureshwor", 1.4), ("kalanki", 2.6), ("swayambhu", 1.8)]},
    {"slug": "kalanki", "name": "Kalanki", "district": "Kathmandu", "coordinates": (27.6931, 85.2774),
     "tags": ["gateway", "transport"],
     "neighbors": [("kalimati", 2.6), ("swayambhu", 2.3), ("sitapaila", 1.9)]},
    {"slug": "swayambhu", "name": "Swayambhu", "district": "Kathmandu", "coordinates": (27.7148, 85.2904),
     "tags": ["heritage"],
     "neighbors": [("kalanki", 2.3), ("kalimati", 1.8), ("thamel", 2.2), ("sitapaila", 1.7)]},
    {"slug": "sitapaila", "name": "Sitapaila", "district": "Kathmandu", "coordinates": (27.7164, 85.2781),
     "tags": ["residential"],
     "neighbors": [("swayambhu", 1.7), ("kalanki", 1.9), ("balaju", 2.4)]},
    {"slug": "balaju", "name": "Balaju", "district": "Kathmandu", "coordinates": (27.7322, 85.3001),
     "tags": ["industrial", "residential"],
     "neighbors": [("sitapaila", 2.4), ("swayambhu", 2.5), ("thamel", 2.8), ("basundhara", 3.1)]},
    {"slug": "basundhara", "name": "Basundhara", "district": "Kathmandu", "coordinates": (27.7448, 85.3255),
     "tags": ["residential"],
     "neighbors": [("balaju", 3.1), ("maharajgunj", 1.9), ("tokha", 2.6)]},
    {"slug": "tokha", "name": "Tokha", "district": "Kathmandu", "coordinates": (27.7573, 85.3349),
     "tags": ["residential", "growing"],
     "neighbors": [("basundhara", 2.6), ("maharajgunj", 3.1)]},
    {"slug": "sinamangal", "name": "Sinamangal", "district": "Kathmandu", "coordinates": (27.6972, 85.3550),
     "tags": ["airport"],
     "neighbors": [("tinkune", 2.1), ("baneshwor", 2.4), ("gaushala", 1.5)]},
    {"slug": "gaushala", "name": "Gaushala", "district": "Kathmandu", "coordinates": (27.7108, 85.3473),
     "tags": ["temple", "commercial"],
     "neighbors": [("sinamangal", 1.5), ("baneshwor", 2.3), ("chabahil", 1.4)]},
    {"slug": "chabahil", "name": "Chabahil", "district": "Kathmandu", "coordinates": (27.7208, 85.3467),
     "tags": ["market"],
     "neighbors": [("gaushala", 1.4), ("baluwatar", 2.6), ("maharajgunj", 2.7)]},
    {"slug": "boudha", "name": "Boudha", "district": "Kathmandu", "coordinates": (27.7215, 85.3616),
     "tags": ["heritage"],
     "neighbors": [("chabahil", 1.6), ("jorpati", 1.8)]},
    {"slug": "jorpati", "name": "Jorpati", "district": "Kathmandu", "coordinates": (27.7286, 85.3669),
     "tags": ["residential"],
     "neighbors": [("boudha", 1.8), ("sundarijal", 4.3)]},
    {"slug": "sundarijal", "name": "Sundarijal", "district": "Kathmandu", "coordinates": (27.7910, 85.4260),
     "tags": ["nature", "trails"],
     "neighbors": [("jorpati", 4.3)]},
    {"slug": "balkumari", "name": "Balkumari", "district": "Lalitpur", "coordinates": (27.6675, 85.3423),
     "tags": ["education"],
     "neighbors": [("koteshwor", 1.7), ("satdobato", 1.3), ("jawalakhel", 3.1)]},
    {"slug": "satdobato", "name": "Satdobato", "district": "Lalitpur", "coordinates": (27.6466, 85.3304),
     "tags": ["residential", "stadium"],
     "neighbors": [("balkumari", 1.3), ("jawalakhel", 3.4), ("imadol", 2.1)]},
    {"slug": "imadol", "name": "Imadol", "district": "Lalitpur", "coordinates": (27.6513, 85.3441),
     "tags": ["residential"],
     "neighbors": [("satdobato", 2.1), ("balkumari", 1.6), ("koteshwor", 2.3)]},
]
