from typing import Callable, List

import numpy as np
import pytest

from busroute.models.domain import Submission

# (center_lat, center_lng, std_lat, std_lng, share)
NEIGHBORHOODS = [
    (32.07, 34.78, 0.010, 0.008, 0.45),
    (32.11, 34.79, 0.008, 0.007, 0.30),
    (31.98, 34.78, 0.012, 0.008, 0.25),
]

# Neighbouring suburbs: (lat, lng, spread)
OUTLIER_ZONES = [
    (31.97, 34.80, 0.005),
    (32.16, 34.79, 0.005),
    (32.02, 34.74, 0.003),
    (32.09, 34.88, 0.005),
    (32.01, 34.77, 0.004),
]

OUT_OF_BOUNDS = [
    (40.7128, -74.006),
    (30.5, 33.5),
    (34.0, 35.0),
]


def generate_submissions(
    count: int = 100,
    outlier_count: int = 7,
    invalid_count: int = 3,
    seed: int = 42,
) -> List[Submission]:
    rng = np.random.default_rng(seed)
    shares = np.array([n[4] for n in NEIGHBORHOODS])
    submissions: list[Submission] = []

    for i in range(count - outlier_count - invalid_count):
        lat, lng, std_lat, std_lng, _ = NEIGHBORHOODS[rng.choice(len(NEIGHBORHOODS), p=shares / shares.sum())]
        submissions.append(
            Submission(id=f"mock_{i}", lat=float(rng.normal(lat, std_lat)), lng=float(rng.normal(lng, std_lng)))
        )
    for i in range(outlier_count):
        lat, lng, spread = OUTLIER_ZONES[i % len(OUTLIER_ZONES)]
        submissions.append(
            Submission(id=f"mock_outlier_{i}", lat=float(rng.normal(lat, spread)), lng=float(rng.normal(lng, spread)))
        )
    for i in range(invalid_count):
        lat, lng = OUT_OF_BOUNDS[i % len(OUT_OF_BOUNDS)]
        submissions.append(Submission(id=f"mock_invalid_{i}", lat=lat, lng=lng))
    return submissions


@pytest.fixture
def mock_submissions() -> Callable[..., List[Submission]]:
    return generate_submissions
