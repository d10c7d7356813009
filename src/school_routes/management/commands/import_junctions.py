from __future__ import annotations

from pathlib import Path
from typing import Any

import polars as pl
from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from school_routes.models import Junction
from school_routes.services.addresses import normalize_address


class Command(BaseCommand):
    help = "Import street intersections and their adjacency from a CSV using Polars."

    def add_arguments(self, parser: Any) -> None:
        parser.add_argument(
            "--csv-path",
            type=str,
            default=str(Path(settings.STREET_DATA_DIR) / "junctions.csv"),
            help="Path to the junctions CSV (CNN, Latitude, Longitude, Streets, Adjacent)",
        )
        parser.add_argument(
            "--replace",
            action="store_true",
            help="Delete existing junctions before importing",
        )

    def handle(self, *_: Any, **options: Any) -> None:
        csv_path = Path(options["csv_path"])
        if not csv_path.exists():
            raise CommandError(f"CSV file does not exist: {csv_path}")

        frame = self._load_and_transform(csv_path)
        records = frame.to_dicts()

        if options["replace"]:
            Junction.objects.all().delete()

        existing = {
            junction.cnn: junction
            for junction in Junction.objects.filter(cnn__in=[row["cnn"] for row in records])
        }

        to_create: list[Junction] = []
        to_update: list[Junction] = []
        dangling = 0
        known = {row["cnn"] for row in records} | set(existing)

        for row in records:
            streets = sorted({normalize_address(street) for street in row["streets"] if street})
            adjacent = [cnn for cnn in row["adjacent"] if cnn != row["cnn"]]
            dangling += sum(1 for cnn in adjacent if cnn not in known)

            junction = existing.get(row["cnn"])
            if junction is None:
                to_create.append(
                    Junction(
                        cnn=row["cnn"],
                        latitude=row["latitude"],
                        longitude=row["longitude"],
                        streets=streets,
                        adjacent=adjacent,
                    )
                )
                continue

            junction.latitude = row["latitude"]
            junction.longitude = row["longitude"]
            junction.streets = streets
            junction.adjacent = adjacent
            to_update.append(junction)

        if to_create:
            Junction.objects.bulk_create(to_create, batch_size=1000)
        if to_update:
            Junction.objects.bulk_update(
                to_update,
                ["latitude", "longitude", "streets", "adjacent"],
                batch_size=1000,
            )

        if dangling:
            self.stdout.write(
                self.style.WARNING(f"{dangling} adjacency entries refer to unknown junctions")
            )
        self.stdout.write(
            self.style.SUCCESS(
                "Imported junctions: "
                + (
                    f"{len(records)} rows normalized, "
                    f"{len(to_create)} created, {len(to_update)} updated"
                )
            )
        )

    @staticmethod
    def _load_and_transform(csv_path: Path) -> pl.DataFrame:
        frame = pl.read_csv(
            csv_path,
            infer_schema_length=5000,
            schema_overrides={"Streets": pl.Utf8, "Adjacent": pl.Utf8},
        )
        required_columns = {"CNN", "Latitude", "Longitude", "Streets", "Adjacent"}
        missing_columns = required_columns.difference(frame.columns)
        if missing_columns:
            raise CommandError(f"Missing expected columns: {sorted(missing_columns)}")

        return (
            frame.select(
                pl.col("CNN").cast(pl.Int64, strict=False).alias("cnn"),
                pl.col("Latitude").cast(pl.Float64, strict=False).alias("latitude"),
                pl.col("Longitude").cast(pl.Float64, strict=False).alias("longitude"),
                pl.col("Streets")
                .fill_null("")
                .str.split("|")
                .list.eval(pl.element().str.strip_chars())
                .alias("streets"),
                pl.col("Adjacent")
                .fill_null("")
                .str.split("|")
                .list.eval(pl.element().str.strip_chars().cast(pl.Int64, strict=False))
                .list.drop_nulls()
                .alias("adjacent"),
            )
            .filter(
                pl.col("cnn").is_not_null()
                & pl.col("latitude").is_not_null()
                & pl.col("longitude").is_not_null()
            )
            .unique(subset=["cnn"], keep="first", maintain_order=True)
        )
