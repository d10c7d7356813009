from __future__ import annotations

from pathlib import Path
from typing import Any

import polars as pl
from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from school_routes.models import School


class Command(BaseCommand):
    help = "Import the public school directory from a CSV using Polars."

    def add_arguments(self, parser: Any) -> None:
        parser.add_argument(
            "--csv-path",
            type=str,
            default=str(Path(settings.STREET_DATA_DIR) / "schools.csv"),
            help="Path to the schools CSV (Name, Types, Address)",
        )
        parser.add_argument(
            "--replace",
            action="store_true",
            help="Delete existing schools before importing",
        )

    def handle(self, *_: Any, **options: Any) -> None:
        csv_path = Path(options["csv_path"])
        if not csv_path.exists():
            raise CommandError(f"CSV file does not exist: {csv_path}")

        frame = self._load_and_transform(csv_path)
        records = frame.to_dicts()

        if options["replace"]:
            School.objects.all().delete()

        existing = {
            (school.name, school.address): school
            for school in School.objects.filter(name__in={row["name"] for row in records})
        }

        to_create: list[School] = []
        to_update: list[School] = []

        for row in records:
            school = existing.get((row["name"], row["address"]))
            if school is None:
                to_create.append(
                    School(name=row["name"], types=row["types"], address=row["address"])
                )
                continue

            school.types = row["types"]
            to_update.append(school)

        if to_create:
            School.objects.bulk_create(to_create, batch_size=1000)
        if to_update:
            School.objects.bulk_update(to_update, ["types"], batch_size=1000)

        self.stdout.write(
            self.style.SUCCESS(
                f"Imported schools: {len(to_create)} created, {len(to_update)} updated"
            )
        )

    @staticmethod
    def _load_and_transform(csv_path: Path) -> pl.DataFrame:
        frame = pl.read_csv(csv_path, infer_schema_length=5000)
        required_columns = {"Name", "Types", "Address"}
        missing_columns = required_columns.difference(frame.columns)
        if missing_columns:
            raise CommandError(f"Missing expected columns: {sorted(missing_columns)}")

        return (
            frame.select(
                pl.col("Name")
                .cast(pl.Utf8, strict=False)
                .str.strip_chars()
                .fill_null("")
                .alias("name"),
                pl.col("Types")
                .cast(pl.Utf8, strict=False)
                .fill_null("")
                .str.split("|")
                .list.eval(pl.element().str.strip_chars())
                .list.eval(pl.element().filter(pl.element().str.len_chars() > 0))
                .alias("types"),
                pl.col("Address")
                .cast(pl.Utf8, strict=False)
                .str.strip_chars()
                .fill_null("")
                .alias("address"),
            )
            .filter(
                (pl.col("name").str.len_chars() > 0) & (pl.col("address").str.len_chars() > 0)
            )
            .unique(subset=["name", "address"], keep="first", maintain_order=True)
        )
