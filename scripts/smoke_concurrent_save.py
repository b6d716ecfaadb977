# scripts/smoke_concurrent_save.py
"""
Two clients overwrite the same estimate at the same time against a running
server. Each save must answer 200 (applied) or 409 (another save in flight),
the row count must not change, and the display number must survive.
"""
import datetime
import os
import platform
import sys
import threading
import traceback
from pathlib import Path

import requests

SCRIPT_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = SCRIPT_DIR.parent
LOG_DIR = PROJECT_ROOT / "artifacts" / "test_logs"

BASE_URL = os.environ.get("BASE_URL", "http://127.0.0.1:5000").rstrip("/")
TIMEOUT = 10

log_buffer = []


def debug(msg):
    log_buffer.append(str(msg))


def sov_line(name, quantity, material, men, hours):
    return {
        "item": name,
        "quantity": quantity,
        "materialPrice": material,
        "expensePrice": 0,
        "laborMen": men,
        "laborHours": hours,
        "notes": "",
    }


def create_opportunity(sess):
    r = sess.post(f"{BASE_URL}/customers", json={
        "name": f"Concurrent Save Customer {datetime.datetime.now():%Y%m%d%H%M%S%f}",
        "companyName": "Smoke Test Co.",
        "address": "1 Test Way",
    }, timeout=TIMEOUT)
    r.raise_for_status()
    customer_id = r.json()["id"]
    r = sess.post(f"{BASE_URL}/customers/{customer_id}/opportunities",
                  json={"description": "Concurrent save smoke", "quoteNumber": "SMOKE-1"}, timeout=TIMEOUT)
    r.raise_for_status()
    return r.json()["id"]


def create_estimate(sess, opportunity_id):
    r = sess.get(f"{BASE_URL}/opportunities/{opportunity_id}/estimates/new", timeout=TIMEOUT)
    r.raise_for_status()
    document = r.json()["document"]
    document["sovItems"][0] = sov_line("Breaker testing", 4, 150, 2, 3)
    r = sess.post(f"{BASE_URL}/opportunities/{opportunity_id}/estimates",
                  json={"document": document, "travelData": None}, timeout=TIMEOUT)
    r.raise_for_status()
    return r.json()


def update_estimate(sess, estimate_id, document, results, idx):
    try:
        r = sess.put(f"{BASE_URL}/estimates/{estimate_id}",
                     json={"document": document, "travelData": None}, timeout=TIMEOUT)
        results[idx] = r.status_code
        debug(f"[DEBUG] update idx={idx} status={r.status_code}")
    except requests.RequestException as e:
        results[idx] = f"EXC: {e}"
        debug(f"[DEBUG] update idx={idx} EXC: {e}")


def write_fail_log(results):
    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        ts = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = LOG_DIR / f"smoke_concurrent_save_{ts}.log"
        with open(log_file, "w", encoding="utf-8") as f:
            f.write(f"[HEADER] timestamp={ts}\n")
            f.write(f"[HEADER] BASE_URL={BASE_URL}\n")
            f.write(f"[HEADER] python executable={sys.executable}\n")
            f.write(f"[HEADER] platform={platform.platform()}\n")
            f.write("[RESULTS]\n")
            for label, ok, detail in results:
                f.write(f"  {'PASS' if ok else 'FAIL'}: {label} [{detail}]\n")
            f.write("[DEBUG]\n")
            for line in log_buffer:
                f.write(f"  {line}\n")
        print(f"[INFO] FAIL log path: {log_file.resolve()}")
    except OSError as e:
        print(f"[ERROR] Could not write log: {e}")


def main() -> int:
    print(f"[INFO] BASE_URL={BASE_URL}")
    sess1 = requests.Session()
    sess2 = requests.Session()

    opportunity_id = create_opportunity(sess1)
    saved = create_estimate(sess1, opportunity_id)
    estimate_id = saved["record"]["id"]
    display_number = saved["record"]["displayNumber"]
    print(f"[INFO] estimate id={estimate_id} display_number={display_number}")

    before = len(sess1.get(f"{BASE_URL}/opportunities/{opportunity_id}/estimates", timeout=TIMEOUT).json())

    doc_a = saved["document"]
    doc_b = dict(saved["document"])
    doc_a["sovItems"][0] = sov_line("Breaker testing", 6, 150, 2, 3)
    doc_b["sovItems"] = [sov_line("Relay testing", 2, 80, 1, 5)] + doc_b["sovItems"][1:]

    statuses = [None, None]
    t1 = threading.Thread(target=update_estimate, args=(sess1, estimate_id, doc_a, statuses, 0))
    t2 = threading.Thread(target=update_estimate, args=(sess2, estimate_id, doc_b, statuses, 1))
    t1.start()
    t2.start()
    t1.join()
    t2.join()
    print(f"[INFO] update results: {statuses}")

    results = []
    for idx, status in enumerate(statuses):
        results.append((f"update_thread_{idx}", status in (200, 409), str(status)))
    results.append(("at least one update applied", 200 in statuses, str(statuses)))

    after = sess1.get(f"{BASE_URL}/opportunities/{opportunity_id}/estimates", timeout=TIMEOUT).json()
    results.append(("estimate count unchanged", len(after) == before, f"before={before} after={len(after)}"))

    final = sess1.get(f"{BASE_URL}/estimates/{estimate_id}", timeout=TIMEOUT).json()
    kept = final["record"]["displayNumber"] == display_number
    results.append(("display number preserved", kept, final["record"]["displayNumber"]))
    first_item = final["document"]["sovItems"][0]["item"]
    results.append(("last write wins", first_item in ("Breaker testing", "Relay testing"), first_item))

    for label, ok, detail in results:
        print(f"{'PASS' if ok else 'FAIL'}: {label} [{detail}]")
    pass_count = sum(1 for r in results if r[1])
    fail_count = len(results) - pass_count
    print(f"TOTAL: {pass_count} PASS, {fail_count} FAIL")
    if fail_count:
        write_fail_log(results)
        return 1
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except Exception as e:
        debug(traceback.format_exc())
        print(f"FAIL: unhandled exception {type(e).__name__}: {e}")
        write_fail_log([("Unhandled exception", False, f"{type(e).__name__}: {e}")])
        sys.exit(1)
