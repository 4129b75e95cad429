"""
Demo users, patients and medical records for the demo records API.
"""

import random
from datetime import datetime, timedelta, timezone

from faker import Faker

from vetemr.config import DEMO_DEFAULT_PASSWORD

DEMO_USERS = [
    ("Clinic Admin", "admin@vet.clinic", "admin"),
    ("Sarah Chen", "vet@vet.clinic", "vet"),
    ("Jamie Rivera", "owner@vet.clinic", "owner"),
]

BREEDS = {
    "dog": ["Golden Retriever", "Beagle", "Border Collie", "Labrador"],
    "cat": ["Maine Coon", "Siamese", "British Shorthair"],
    "bird": ["Cockatiel", "Budgerigar"],
    "reptile": ["Bearded Dragon", "Leopard Gecko"],
    "other": ["Holland Lop"],
}

VISITS = [
    ("Annual wellness exam", "Vaccinations updated", "", ["Rabies booster"]),
    ("Otitis externa", "Ear cleaning, topical drops", "Recheck in 2 weeks",
     ["Otomax 10 drops BID"]),
    ("Mild dental tartar", "Scaling scheduled", "", []),
    ("Soft tissue injury, left hind leg", "Rest and anti-inflammatories",
     "Owner to limit exercise", ["Rimadyl 50mg", "Gabapentin 100mg"]),
]


def seed_demo(store, num_patients: int = 6, seed: int = 42):
    """Create the demo users and a handful of patients with history."""
    fake = Faker()
    Faker.seed(seed)
    rng = random.Random(seed)

    users = {role: store.add_user(name, email, role, DEMO_DEFAULT_PASSWORD)
             for name, email, role in DEMO_USERS}
    vet, owner = users["vet"], users["owner"]

    start = datetime(2024, 1, 8, 9, 30, tzinfo=timezone.utc)
    for i in range(num_patients):
        species = rng.choice(sorted(BREEDS))
        animal = store.add_animal({
            "name": fake.first_name(),
            "species": species,
            "breed": rng.choice(BREEDS[species]),
            "age": round(rng.uniform(0.5, 14), 1),
            "weight": round(rng.uniform(0.1, 40), 1),
            "gender": rng.choice(["male", "female", "unknown"]),
            # The first two patients belong to the demo owner.
            "owner_id": owner["id"] if i < 2 else None,
        })
        for n in range(rng.randint(0, 3)):
            diagnosis, treatment, notes, rx = rng.choice(VISITS)
            when = start + timedelta(days=30 * n + i)
            store.add_record({
                "animal_id": animal["id"],
                "diagnosis": diagnosis,
                "treatment": treatment,
                "notes": notes,
                "prescription": rx,
                "created_at": when.isoformat(),
            }, vet=vet)

    print(f"[init] Seeded {len(users)} users and {num_patients} patients")
    return users
