from __future__ import annotations

from pathlib import Path
from typing import Any

import polars as pl
from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from school_routes.models import StreetAddress
from school_routes.services.addresses import normalize_address, normalize_house_number


class Command(BaseCommand):
    help = "Import geocoded street addresses from a CSV using Polars."

    def add_arguments(self, parser: Any) -> None:
        parser.add_argument(
            "--csv-path",
            type=str,
            default=str(Path(settings.STREET_DATA_DIR) / "addresses.csv"),
            help="Path to the addresses CSV (Number, Street, Latitude, Longitude)",
        )
        parser.add_argument(
            "--replace",
            action="store_true",
            help="Delete existing addresses before importing",
        )

    def handle(self, *_: Any, **options: Any) -> None:
        csv_path = Path(options["csv_path"])
        if not csv_path.exists():
            raise CommandError(f"CSV file does not exist: {csv_path}")

        frame = self._load_and_transform(csv_path)
        records = frame.to_dicts()

        if options["replace"]:
            StreetAddress.objects.all().delete()

        existing = {
            (address.street, address.number): address
            for address in StreetAddress.objects.filter(
                street__in={row["street"] for row in records}
            )
        }

        to_create: list[StreetAddress] = []
        to_update: list[StreetAddress] = []

        for row in records:
            address = existing.get((row["street"], row["number"]))
            if address is None:
                to_create.append(
                    StreetAddress(
                        number=row["number"],
                        street=row["street"],
                        latitude=row["latitude"],
                        longitude=row["longitude"],
                    )
                )
                continue

            address.latitude = row["latitude"]
            address.longitude = row["longitude"]
            to_update.append(address)

        if to_create:
            StreetAddress.objects.bulk_create(to_create, batch_size=1000)
        if to_update:
            StreetAddress.objects.bulk_update(
                to_update, ["latitude", "longitude"], batch_size=1000
            )

        self.stdout.write(
            self.style.SUCCESS(
                "Imported street addresses: "
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
            schema_overrides={"Number": pl.Utf8, "Street": pl.Utf8},
        )
        required_columns = {"Number", "Street", "Latitude", "Longitude"}
        missing_columns = required_columns.difference(frame.columns)
        if missing_columns:
            raise CommandError(f"Missing expected columns: {sorted(missing_columns)}")

        return (
            frame.select(
                pl.col("Number")
                .fill_null("")
                .map_elements(normalize_house_number, return_dtype=pl.Utf8)
                .alias("number"),
                pl.col("Street")
                .str.strip_chars()
                .fill_null("")
                .map_elements(normalize_address, return_dtype=pl.Utf8)
                .alias("street"),
                pl.col("Latitude").cast(pl.Float64, strict=False).alias("latitude"),
                pl.col("Longitude").cast(pl.Float64, strict=False).alias("longitude"),
            )
            .filter(
                (pl.col("number").str.len_chars() > 0)
                & (pl.col("street").str.len_chars() > 0)
                & pl.col("latitude").is_not_null()
                & pl.col("longitude").is_not_null()
            )
            .unique(subset=["street", "number"], keep="first", maintain_order=True)
        )
