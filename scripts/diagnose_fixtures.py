import argparse
import logging
import os
import sys
import time

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from apnealog.aggregator import compute_summary
from apnealog.disciplines import resolve_session_discipline
from apnealog.storage import RecordStore


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("data_dir", help="Directory with sessions.json and dives.json.")
    parser.add_argument("--sessions-file", default="sessions.json")
    parser.add_argument("--dives-file", default="dives.json")
    parser.add_argument("--users-file", default="users.json")
    args = parser.parse_args()

    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(message)s")

    started = time.time()
    store = RecordStore.from_directory(
        args.data_dir,
        sessions_file=args.sessions_file,
        dives_file=args.dives_file,
        users_file=args.users_file,
    )
    sessions = store.get_all_sessions()
    dives = store.get_all_dives()
    session_ids = {s.id for s in sessions}
    staff_ids = {u.id for u in store.get_instructors()}

    orphans = [d for d in dives if d.session_id not in session_ids]
    skipped = [
        s for s in sessions if resolve_session_discipline(s.type, s.discipline) is None
    ]
    unmeasured = [d for d in dives if d.measurement is None]
    unsupervised = [
        s for s in sessions if s.instructor_id is not None and s.instructor_id not in staff_ids
    ]

    summary = compute_summary(sessions, dives)
    elapsed = time.time() - started

    print(f"Sessions: {len(sessions)}")
    print(f"Dives: {len(dives)}")
    print(f"Orphan dives: {len(orphans)}")
    for dive in orphans:
        print(f"  - dive {dive.id} -> missing session {dive.session_id}")
    print(f"Sessions outside discipline stats: {len(skipped)}")
    for session in skipped:
        print(f"  - session {session.id}: type={session.type!r} discipline={session.discipline!r}")
    print(f"Dives without a measurement: {len(unmeasured)}")
    print(f"Sessions with an unknown instructor: {len(unsupervised)}")
    for session in unsupervised:
        print(f"  - session {session.id} -> instructor {session.instructor_id}")
    print(f"Counted dives: {summary.dive_type_comparison.open_water + summary.dive_type_comparison.pool}")
    print(f"Elapsed: {elapsed:.3f}s")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
