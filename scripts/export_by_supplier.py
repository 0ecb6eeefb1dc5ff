"""
Export Orders By Supplier

Exports any set of orders, even across suppliers: orders are grouped by
supplier and each group is sent to POST /api/order-export as its own
batch (split further if it exceeds the per-export limit). One failing
group doesn't stop the others; the run ends with a summary.

Usage:
    python scripts/export_by_supplier.py ORDER_ID [ORDER_ID ...] --token TOKEN
    python scripts/export_by_supplier.py --token TOKEN --out exports/ ID1 ID2
"""

import argparse
import os
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import httpx

# Add backend to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from models.order_export import MAX_ORDERS_PER_EXPORT, SupplierGroup


# ===================
# CONFIGURATION
# ===================

DEFAULT_BASE_URL = "http://localhost:8000"
EXPORT_PATH = "/api/order-export"
TIMEOUT = 60.0

_FILENAME_RE = re.compile(r'filename="?([^";]+)"?')


@dataclass
class GroupOutcome:
    supplier_name: str
    order_ids: list[str]
    filename: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class RunSummary:
    outcomes: list[GroupOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> list[GroupOutcome]:
        return [o for o in self.outcomes if o.ok]

    @property
    def failed(self) -> list[GroupOutcome]:
        return [o for o in self.outcomes if not o.ok]


# ===================
# GROUPING
# ===================

def group_order_rows(rows: list[dict], order_ids: list[str]) -> tuple[list[SupplierGroup], list[str]]:
    """
    Group order rows by supplier, following the order of `order_ids`.

    Returns (groups, unassigned) where unassigned are ids that weren't
    found or have no supplier.
    """
    by_id = {row["id"]: row for row in rows}
    groups: dict[str, SupplierGroup] = {}
    unassigned = []

    for order_id in order_ids:
        row = by_id.get(order_id)
        supplier = (row or {}).get("supplier")
        if not supplier:
            unassigned.append(order_id)
            continue
        group = groups.get(supplier["id"])
        if group is None:
            group = SupplierGroup(
                supplier_id=supplier["id"],
                supplier_name=supplier.get("name") or supplier["id"],
                order_ids=[],
                order_count=0,
            )
            groups[supplier["id"]] = group
        group.order_ids.append(order_id)
        group.order_count += 1

    return list(groups.values()), unassigned


def chunked(items: list[str], size: int) -> list[list[str]]:
    return [items[i:i + size] for i in range(0, len(items), size)]


def filename_from_response(response: httpx.Response, fallback: str) -> str:
    """Attachment filename the server chose, or `fallback`."""
    match = _FILENAME_RE.search(response.headers.get("content-disposition", ""))
    return match.group(1) if match else fallback


def unique_output_path(output_dir: Path, filename: str, used: set[str]) -> Path:
    """
    Path under `output_dir` that neither exists nor was written this run.

    Two batches of one supplier on one day get the same server filename
    (PO_Request_<supplier>_Combined_10_Orders_<date>.xlsx), as do suppliers
    whose names sanitize alike; later ones get a _part2, _part3... suffix.
    """
    path = output_dir / filename
    n = 1
    while path.name in used or path.exists():
        n += 1
        path = output_dir / f"{Path(filename).stem}_part{n}{Path(filename).suffix}"
    used.add(path.name)
    return path


def error_from_response(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    error = body.get("error") if isinstance(body, dict) else None
    return f"HTTP {response.status_code}: {error or 'Unknown error'}"


# ===================
# EXPORT
# ===================

def fetch_order_rows(order_ids: list[str]) -> list[dict]:
    """Order id + supplier for each requested order."""
    from config.database import get_supabase_client

    result = (
        get_supabase_client()
        .table("orders")
        .select("id, order_number, supplier:suppliers(id, name)")
        .in_("id", order_ids)
        .execute()
    )
    return result.data or []


def export_groups(
    client: httpx.Client,
    groups: list[SupplierGroup],
    output_dir: Path,
    template_type: Optional[str] = None,
    batch_size: int = MAX_ORDERS_PER_EXPORT,
) -> RunSummary:
    """One export call per supplier batch; failures are collected, not raised."""
    summary = RunSummary()
    output_dir.mkdir(parents=True, exist_ok=True)
    used: set[str] = set()

    for group in groups:
        for batch in chunked(group.order_ids, batch_size):
            outcome = GroupOutcome(supplier_name=group.supplier_name, order_ids=batch)
            payload = {"orderIds": batch}
            if template_type:
                payload["templateType"] = template_type

            try:
                response = client.post(EXPORT_PATH, json=payload)
            except httpx.HTTPError as e:
                outcome.error = f"Request failed: {e}"
                summary.outcomes.append(outcome)
                continue

            if response.status_code != 200:
                outcome.error = error_from_response(response)
            else:
                fallback = f"PO_Request_{group.supplier_id}_{len(summary.outcomes) + 1}.xlsx"
                path = unique_output_path(output_dir, filename_from_response(response, fallback), used)
                path.write_bytes(response.content)
                outcome.filename = path.name

            summary.outcomes.append(outcome)

    return summary


def print_summary(summary: RunSummary, unassigned: list[str]):
    print("\n" + "=" * 70)
    print("EXPORT SUMMARY")
    print("=" * 70)
    for outcome in summary.succeeded:
        print(f"  OK    {outcome.supplier_name} ({len(outcome.order_ids)} orders) -> {outcome.filename}")
    for outcome in summary.failed:
        print(f"  FAIL  {outcome.supplier_name} ({len(outcome.order_ids)} orders): {outcome.error}")
    for order_id in unassigned:
        print(f"  SKIP  {order_id}: not found or no supplier")
    print(f"\n{len(summary.succeeded)} succeeded, {len(summary.failed)} failed, {len(unassigned)} skipped")


def main():
    parser = argparse.ArgumentParser(
        description="Export orders as one workbook per supplier",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("order_ids", nargs="+", help="Order ids to export")
    parser.add_argument(
        "--base-url",
        default=DEFAULT_BASE_URL,
        help=f"API base URL (default: {DEFAULT_BASE_URL})"
    )
    parser.add_argument(
        "--token",
        default=os.environ.get("EXPORT_API_TOKEN"),
        help="Bearer token (default: $EXPORT_API_TOKEN)"
    )
    parser.add_argument("--template", default=None, help="Template to request (supplier setting wins)")
    parser.add_argument("--out", default="exports", help="Output directory (default: exports)")
    args = parser.parse_args()

    if not args.token:
        parser.error("a bearer token is required (--token or EXPORT_API_TOKEN)")

    groups, unassigned = group_order_rows(fetch_order_rows(args.order_ids), args.order_ids)

    with httpx.Client(
        base_url=args.base_url,
        headers={"Authorization": f"Bearer {args.token}"},
        timeout=TIMEOUT,
    ) as client:
        summary = export_groups(client, groups, Path(args.out), template_type=args.template)

    print_summary(summary, unassigned)
    return 1 if summary.failed else 0


if __name__ == "__main__":
    sys.exit(main())
