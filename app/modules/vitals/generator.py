import random

from app.modules.vitals.models import VitalsReading


def generate_random_vitals(rng: random.Random | None = None) -> VitalsReading:
    """Produce a synthetic reading that lands in every severity band often enough for demos."""
    rng = rng or random.Random()
    systolic = rng.randint(90, 169)
    diastolic = rng.randint(50, 89)
    return VitalsReading(
        hr=rng.randint(40, 189),
        temp=round(rng.uniform(95.0, 104.9), 1),
        spo2=rng.randint(80, 99),
        bp=f"{systolic}/{diastolic}",
    )
