from cvchat.models import CV
from cvchat.services import evidence_store

DEMO_TOKEN = "demo-token"

DEMO_CV = {
    "person": {
        "name": "Alex Example",
        "title": "Project Coordinator",
        "location": "Austria",
        "summary": "Organized professional with experience in coordination and documentation.",
    },
    "skills": ["Organization", "Communication", "Documentation"],
    "experience": [
        {
            "organization": "Example Company",
            "role": "Project Coordinator",
            "start": "",
            "end": "",
            "tasks": [
                "Coordinated internal tasks",
                "Maintained project documentation",
            ],
            "keywords": ["Project coordination", "Documentation"],
        },
    ],
    "projects": [],
    "education": [],
    "certificates": [],
    "languages": [],
}


def seed():
    print("🌱 Seeding demo profile...")

    # prevent duplicates
    if CV.query.filter_by(token=DEMO_TOKEN).first():
        print("✅ Demo profile already present")
        return

    evidence_store.create_profile(DEMO_CV, token=DEMO_TOKEN)
    print(f"✅ Demo profile seeded with token '{DEMO_TOKEN}'")
