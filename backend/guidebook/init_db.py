from guidebook.core.enums import RoleName
from guidebook.database import Base, SessionLocal, engine
from guidebook.models import Role

# Create all tables
print("Creating database tables...")
Base.metadata.create_all(bind=engine)

# Seed the role catalog
db = SessionLocal()
try:
    existing = {role.name for role in db.query(Role).all()}
    for role_name in RoleName:
        if role_name.value not in existing:
            db.add(Role(name=role_name.value, description=f"{role_name.value} role"))
    db.commit()
finally:
    db.close()
print("✅ Tables created successfully!")
