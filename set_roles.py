import sqlite3
import sys


def promote(email, db_path="database.db", role="admin"):
    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()

    cursor.execute("""
    UPDATE profiles
    SET role=?
    WHERE email=?
    """, (role, email.strip().lower()))
    updated = cursor.rowcount

    conn.commit()
    conn.close()
    return updated


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("usage: python set_roles.py EMAIL [DB_PATH]")
        sys.exit(1)

    if promote(*sys.argv[1:3]):
        print("✅ Role updated")
    else:
        print("❌ No profile with that email")
        sys.exit(1)
