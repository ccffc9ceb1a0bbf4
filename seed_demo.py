"""
Seed script: creates the tables plus a demo admin, teachers with hourly rates
and a student, then prints an access token for each user.

Usage:
    python seed_demo.py

Idempotent: users are upserted by email and existing active rates are kept.
"""
from app.database import SessionLocal, engine
from app.models import Base, User, UserRole, LessonType
from app.auth.security import create_access_token
from app.services.teacher_rates import create_rate, get_active_rate

USERS = [
    {"email": "admin@lessons.local", "first_name": "Ada", "last_name": "Admin", "role": UserRole.ADMIN},
    {
        "email": "guitar.teacher@lessons.local",
        "first_name": "Gil",
        "last_name": "Strummer",
        "role": UserRole.TEACHER,
        "rates": {LessonType.GUITAR: 6000, LessonType.BASS: 5500},
    },
    {
        "email": "voice.teacher@lessons.local",
        "first_name": "Vera",
        "last_name": "Tone",
        "role": UserRole.TEACHER,
        "rates": {LessonType.VOICE: 5000, LessonType.GUITAR: 4500},
    },
    {"email": "student@lessons.local", "first_name": "Sam", "last_name": "Learner", "role": UserRole.STUDENT},
]

Base.metadata.create_all(bind=engine)

db = SessionLocal()
try:
    for u in USERS:
        user = db.query(User).filter(User.email == u["email"]).first()
        if not user:
            user = User(
                email=u["email"],
                first_name=u["first_name"],
                last_name=u["last_name"],
                role=u["role"],
            )
            db.add(user)
            db.commit()
            db.refresh(user)
            print(f"  [+] {u['role'].value}: {u['email']} (id={user.id})")
        else:
            print(f"  [=] {u['role'].value}: {u['email']} (id={user.id})")

        for lesson_type, cents in u.get("rates", {}).items():
            if get_active_rate(db, user.id, lesson_type) is None:
                create_rate(db, user, lesson_type, cents)
                print(f"      rate {lesson_type.value}: {cents} cents")

        token = create_access_token({"sub": user.id})
        print(f"      token: {token}")

    print("\nDone.")
finally:
    db.close()
