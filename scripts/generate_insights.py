#!/usr/bin/env python3
"""
Manual Insights Generation.

Generates an insight report for one user through the configured record
provider and prints it as JSON.

Usage:
    python scripts/generate_insights.py [user_id]

With INSIGHTS_RECORD_PROVIDER=static (the default) a built-in demo student
is used; with json_file the report is built from
INSIGHTS_EXPORT_DIR/<user_id>.json.
"""

import asyncio
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from modules.insights import InsightsService, get_record_provider
from shared.utils.config import settings

DEMO_USER_ID = "demo-student"

DEMO_RECORDS = {
    "academicRecords": [
        {"subject": "Math", "score": 46, "maxScore": 50, "date": "2024-03-01"},
        {"subject": "Science", "score": 78, "isPercentage": True, "date": "2024-02-12"},
        {"subject": "English", "score": 58, "isPercentage": True, "date": "2024-01-20"},
    ],
    "extracurricular": [
        {"activity": "Music", "achievement": "School choir solo", "date": "2024-02-20"},
        {"activity": "Music", "date": "2024-03-05"},
    ],
    "sportsRecords": [
        {"sportName": "Swimming", "position": "Silver", "date": "2024-02-25"},
    ],
    "journals": [
        {"mood": "Happy", "date": "2024-03-01"},
        {"mood": "Tired", "date": "2024-03-04"},
    ],
    "goals": [
        {"title": "Read 10 books", "status": "In Progress", "priority": "high"},
    ],
    "feedback": [
        {"text": "Participates actively in class", "type": "positive"},
    ],
    "profiles": [
        {"displayName": "Demo Student", "grade": "Grade 6"},
    ],
}


def build_provider():
    """Record provider selected by INSIGHTS_RECORD_PROVIDER."""
    if settings.INSIGHTS_RECORD_PROVIDER == "static":
        return get_record_provider("static", {"users": {DEMO_USER_ID: DEMO_RECORDS}})
    return get_record_provider(settings.INSIGHTS_RECORD_PROVIDER)


async def generate(user_id: str) -> int:
    """Generate and print the report for one user."""
    service = InsightsService(build_provider())

    print(f"Generating insights for: {user_id}")
    report = await service.generate_insights(user_id)

    if report is None:
        print("✗ Insights unavailable, please add more data")
        return 1

    print("✓ Generated insights:")
    print(f"  Top Skill: {report.child_snapshot.top_skill}")
    print(f"  Weak Area: {report.child_snapshot.weak_area}")
    print(f"  Growth Score: {report.child_snapshot.growth_score}")
    print()
    print(json.dumps(report.to_dict(), indent=2))
    return 0


if __name__ == "__main__":
    target_user = sys.argv[1] if len(sys.argv) > 1 else DEMO_USER_ID
    sys.exit(asyncio.run(generate(target_user)))
