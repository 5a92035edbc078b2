#!/usr/bin/env python
"""Seed the development database with an admin profile and sample songs.

Constraints:
- Refuses to run in staging or prod (TUNEBASE_ENV check)
- Idempotent: existing rows are left untouched
- Never runs automatically (manual invocation only)

The admin profile id must be the id of an identity that already exists in
Supabase Auth (sign up first, then pass its id here). Admin status lives
only in user_profiles.role.

Usage:
    cd python && DATABASE_URL=... python ../scripts/seed_dev.py <admin-user-id>
"""

import os
import sys
from uuid import UUID

SAMPLE_SONGS = [
    ("Morning Static", "The Placeholders", "Demo Tapes"),
    ("Night Bus", "The Placeholders", "Demo Tapes"),
    ("Field Recording #3", None, None),
]
SAMPLE_AUDIO_URL = "https://fake-storage.test/storage/v1/object/public/songs/seed-{n}.mp3"


def main():
    # 1. Environment check (hard fail in staging/prod)
    tunebase_env = os.getenv("TUNEBASE_ENV", "local")
    if tunebase_env not in ("local", "test"):
        print(f"ERROR: seed_dev.py refuses to run in TUNEBASE_ENV={tunebase_env}")
        sys.exit(1)

    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        print("ERROR: DATABASE_URL environment variable must be set")
        sys.exit(1)

    if len(sys.argv) != 2:
        print("Usage: seed_dev.py <admin-user-id>")
        sys.exit(1)
    try:
        admin_id = UUID(sys.argv[1])
    except ValueError:
        print(f"ERROR: {sys.argv[1]!r} is not a UUID")
        sys.exit(1)

    from sqlalchemy import select

    from tunebase.db import Song, UserProfile, UserRole, create_db_engine, create_session_factory

    session_factory = create_session_factory(create_db_engine(database_url))

    with session_factory() as db:
        # 2. Admin profile
        profile = db.get(UserProfile, admin_id)
        if profile is None:
            db.add(UserProfile(id=admin_id, role=UserRole.admin.value, display_name="Admin"))
            profile_status = "Created"
        elif profile.role != UserRole.admin.value:
            profile.role = UserRole.admin.value
            profile_status = "Promoted"
        else:
            profile_status = "Exists"

        # 3. Sample songs, keyed by title
        existing = set(db.scalars(select(Song.title).where(Song.uploaded_by == admin_id)))
        created = 0
        for n, (title, artist, album) in enumerate(SAMPLE_SONGS):
            if title in existing:
                continue
            db.add(
                Song(
                    title=title,
                    artist=artist,
                    album=album,
                    file_path=SAMPLE_AUDIO_URL.format(n=n),
                    uploaded_by=admin_id,
                )
            )
            created += 1

        db.commit()

    # 4. Report
    db_display = database_url.split("@")[1] if "@" in database_url else database_url
    print(f"Database: {db_display}")
    print(f"TUNEBASE_ENV: {tunebase_env}")
    print()
    print(f"{profile_status}: admin profile {admin_id}")
    print(f"Created {created} sample song(s), {len(SAMPLE_SONGS) - created} already present")


if __name__ == "__main__":
    main()
