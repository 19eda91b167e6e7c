import random

from cheetahtype.schemas import IdentityProfileSchema, RecordTestSchema
from cheetahtype.services.recording import record_test
from cheetahtype.services.users import upsert_user

DEMO_USERS = ['testuser1', 'testuser2', 'testuser3']
TESTS_PER_USER = 5


def seed_demo_data(seed: int = 42) -> int:
    """Create demo users with a handful of timed tests each."""
    rng = random.Random(seed)
    created = 0
    for name in DEMO_USERS:
        user = upsert_user(IdentityProfileSchema(
            firebase_uid=f'demo-{name}',
            email=f'{name}@example.com',
            display_name=name,
        ))
        for _ in range(TESTS_PER_USER):
            time_limit = rng.choice([15, 30, 60])
            wpm = rng.randint(35, 120)
            accuracy = rng.randint(850, 1000) / 10
            record_test(RecordTestSchema(
                firebase_uid=user.firebase_uid,
                user_email=user.email,
                wpm=wpm,
                accuracy=accuracy,
                actual_duration=time_limit,
                test_mode='time',
                time_limit=time_limit,
                wpm_samples=[wpm + rng.randint(-8, 8) for _ in range(time_limit // 5)],
            ))
            created += 1
    return created
