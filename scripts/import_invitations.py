# scripts/import_invitations.py
# =============================================================================
# 🚚 Bulk import of invitations from a guest list (xlsx/csv).
# - One row per invitee; rows sharing `invitation_key` form one invitation.
# - Columns: invitation_key, first_name, last_name, is_primary, side,
#   villa_offered (optional: code).
# - Creates invitation + invitees + empty RSVP through app.crud.rsvp_crud and
#   prints the personalised link of each one (first-first-CODE).
# =============================================================================

import argparse
import json
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pandas as pd
from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

REQUIRED_COLUMNS: List[str] = ["invitation_key", "first_name"]
VALID_SIDES = {"bride", "groom"}
TRUTHY = {"1", "true", "yes", "y", "x"}
FALSY = {"0", "false", "no", "n"}


@dataclass
class InvitationRow:
    key: str
    side: Optional[str] = None
    villa_offered: bool = True
    code: Optional[str] = None
    invitees: List[Dict] = field(default_factory=list)


def _flag(value: str, default: bool) -> Optional[bool]:
    v = (value or "").strip().lower()
    if not v:
        return default
    if v in TRUTHY:
        return True
    if v in FALSY:
        return False
    return None


def _read_table(file_path: str, *, sheet_name: Optional[str] = None, csv_sep: str = ",") -> pd.DataFrame:
    """Reads .xlsx/.xls or .csv with dtype=str and fillna('')."""
    if file_path.lower().endswith((".xlsx", ".xls")):
        return pd.read_excel(file_path, dtype=str, sheet_name=sheet_name or 0).fillna("")
    return pd.read_csv(file_path, dtype=str, sep=csv_sep).fillna("")


def load_invitation_rows(file_path: str, *, sheet_name: Optional[str] = None,
                         csv_sep: str = ",") -> Tuple[List[InvitationRow], List[str]]:
    """Groups the guest list into invitations. Returns (invitations, errors)."""
    df = _read_table(file_path, sheet_name=sheet_name, csv_sep=csv_sep)
    df.columns = df.columns.str.strip().str.lower()
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {', '.join(missing)}")

    errors: List[str] = []
    groups: Dict[str, InvitationRow] = {}

    for idx, row in df.iterrows():
        row_num = idx + 2  # Header is line 1.
        key = (row.get("invitation_key", "") or "").strip()
        first = (row.get("first_name", "") or "").strip()
        if not key:
            errors.append(f"Row {row_num}: 'invitation_key' is empty.")
            continue
        if not first:
            errors.append(f"Row {row_num}: 'first_name' is empty.")
            continue

        group = groups.get(key)
        if group is None:
            group = groups[key] = InvitationRow(key=key)

        side = (row.get("side", "") or "").strip().lower()
        if side:
            if side in VALID_SIDES:
                group.side = side
            else:
                errors.append(f"Row {row_num}: side '{side}' ignored (use bride/groom).")

        villa = _flag(row.get("villa_offered", ""), group.villa_offered)
        if villa is None:
            errors.append(f"Row {row_num}: villa_offered '{row.get('villa_offered')}' not understood.")
        else:
            group.villa_offered = villa

        code = (row.get("code", "") or "").strip().upper()
        if code:
            group.code = code

        group.invitees.append({
            "first_name": first,
            "last_name": (row.get("last_name", "") or "").strip(),
            "is_primary": bool(_flag(row.get("is_primary", ""), False)),
        })

    return list(groups.values()), errors


def import_invitations(db, rows: List[InvitationRow]) -> Tuple[List[Tuple[str, str]], List[str]]:
    """Creates each invitation. Returns ([(key, link)], errors); one bad row never stops the batch."""
    from app.crud import rsvp_crud
    from app.models import SideEnum
    from app.routers.admin import invitation_link

    created: List[Tuple[str, str]] = []
    errors: List[str] = []
    for row in rows:
        try:
            invitation = rsvp_crud.create_invitation(
                db,
                row.invitees,
                side=SideEnum(row.side) if row.side else None,
                villa_offered=row.villa_offered,
                code=row.code,
            )
        except (ValueError, RuntimeError) as e:
            errors.append(f"Invitation '{row.key}': {e}")
            continue
        created.append((row.key, invitation_link(invitation)))
    return created, errors


def main():
    load_dotenv()
    parser = argparse.ArgumentParser(description="Bulk invitation importer.")
    parser.add_argument("file", help="Path to the .xlsx/.xls or .csv guest list")
    parser.add_argument("--sheet", default=None, help="Excel sheet name (optional)")
    parser.add_argument("--sep", default=",", help="CSV separator (default ',')")
    parser.add_argument("--dry-run", action="store_true", help="Validate and preview only; nothing is written")
    args = parser.parse_args()

    print(f"📥 Loading file: {args.file}")
    try:
        rows, errors = load_invitation_rows(args.file, sheet_name=args.sheet, csv_sep=args.sep)
    except (OSError, ValueError) as e:
        print(f"❌ Could not read guest list: {e}")
        sys.exit(1)

    if errors:
        print("⚠️  Validation warnings:")
        print(" - " + "\n - ".join(errors))
    if not rows:
        print("⛔ Nothing to import.")
        sys.exit(1)

    print(f"📦 Invitations prepared: {len(rows)}")
    if args.dry_run:
        print("🧪 DRY-RUN: nothing will be written.")
        print(json.dumps([r.__dict__ for r in rows[:3]], indent=2, ensure_ascii=False))
        sys.exit(0)

    from app.db import SessionLocal

    db = SessionLocal()
    try:
        created, import_errors = import_invitations(db, rows)
    finally:
        db.close()

    for key, link in created:
        print(f"   ✓ {key}: /invitation/{link}")
    if import_errors:
        print("   ✗ " + "\n   ✗ ".join(import_errors))
    print(f"\n✅ Created {len(created)} invitation(s), {len(import_errors)} error(s).")


if __name__ == "__main__":
    main()
