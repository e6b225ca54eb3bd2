# -*- coding: utf-8 -*-
"""
main.py

Entry point for the campus complaint portal.

Modes
--------------------------------------
1. API server
   - runs app_fastapi:app with uvicorn

2. Watch mode
   - ClientStateMirror against the running API
   - prints the stats after every poll (30s by default)

3. Local-only console
   - no server: LocalBackend + LocalStore (JSON snapshot file)
   - submit / list / support / comment from the terminal
"""

import time

from core.config import API_BASE_URL, POLL_INTERVAL_SECONDS
from core.errors import PortalError
from client.api_client import CampusApiClient
from client.local_backend import LocalBackend
from client.mirror import ClientStateMirror, MirrorCache


# =====================================================================
#  mode 1: API server
# =====================================================================
def run_server_mode():
    import uvicorn

    uvicorn.run("app_fastapi:app", host="0.0.0.0", port=8000)


# =====================================================================
#  mode 2: watch the API through the client mirror
# =====================================================================
def _print_stats(mirror: ClientStateMirror):
    stats = mirror.stats
    flag = " (stale)" if mirror.is_stale else ""
    print(
        f"\n[stats{flag}] total={stats.get('total', 0)} "
        f"pending={stats.get('pending', 0)} resolved={stats.get('resolved', 0)}"
    )
    for name, count in (stats.get("by_category") or {}).items():
        print(f"  - {name}: {count}")


def run_watch_mode():
    print(f"\n[mode 2] watching {API_BASE_URL} (Ctrl+C to stop)")
    client = CampusApiClient(API_BASE_URL)
    mirror = ClientStateMirror(client, MirrorCache())

    try:
        while True:
            mirror.refresh()
            _print_stats(mirror)
            time.sleep(POLL_INTERVAL_SECONDS)
    except KeyboardInterrupt:
        print("\nStopped.")
    finally:
        client.close()


# =====================================================================
#  mode 3: local-only console
# =====================================================================
def _print_complaints(mirror: ClientStateMirror):
    complaints = mirror.complaints
    if not complaints:
        print("(no complaints yet)")
        return
    for c in complaints:
        print(
            f"- [{c['status']}] {c['title']} ({c['category']}) "
            f"supports={c['support_count']} comments={len(c['comments'])} id={c['id']}"
        )


def run_local_mode():
    print("\n[mode 3] local-only console (commands: add, list, support <id>, comment <id>, stats, login, resolve <id>, exit)")
    mirror = ClientStateMirror(LocalBackend.from_file(), MirrorCache())
    mirror.refresh()

    while True:
        try:
            line = input("\ncampus > ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nBye.")
            break

        if not line:
            continue
        cmd, _, arg = line.partition(" ")
        arg = arg.strip()

        try:
            if cmd in ("exit", "quit"):
                print("Bye.")
                break
            elif cmd == "add":
                print("categories:", ", ".join(mirror.categories))
                data = {
                    "title": input("title > "),
                    "description": input("description > "),
                    "category": input("category > "),
                    "location": input("location (optional) > "),
                    "student_name": input("name (optional) > "),
                }
                print("submitted:", mirror.submit_complaint(data))
            elif cmd == "list":
                _print_complaints(mirror)
            elif cmd == "support":
                now_supported = mirror.toggle_support(arg)
                print("supported" if now_supported else "support removed")
            elif cmd == "comment":
                name = input("name (optional) > ")
                text = input("comment > ")
                print("comment added:", mirror.add_comment(arg, name, text))
            elif cmd == "stats":
                _print_stats(mirror)
            elif cmd == "login":
                ok = mirror.backend.login(input("username > "), input("password > "))
                print("logged in as admin" if ok else "invalid credentials")
            elif cmd == "resolve":
                mirror.backend.update_status(arg, "resolved")
                mirror.refresh()
                print("marked resolved")
            else:
                print("unknown command")
        except PortalError as e:
            print(f"[error] {e.message}")


# =====================================================================
#  main entry point
# =====================================================================

def main():
    print("===== Campus complaint portal =====")
    print("1) API server")
    print("2) Watch API (client mirror)")
    print("3) Local-only console")
    print("0) Exit")

    while True:
        mode = input("\nChoose a mode (1/2/3/0) > ").strip()
        if mode == "1":
            run_server_mode()
            break
        elif mode == "2":
            run_watch_mode()
            break
        elif mode == "3":
            run_local_mode()
            break
        elif mode == "0":
            print("Bye.")
            break
        else:
            print("Invalid choice, please enter 1, 2, 3 or 0.")


if __name__ == "__main__":
    main()
