#!/usr/bin/env python3
"""Create the database schema and load the system maintenance templates.

Usage:
    python scripts/seed_templates.py [--db PATH] [--demo-home NAME]
"""

import argparse
import asyncio
import logging

from helixintel.core.config import settings
from helixintel.core.sqlite_store import SQLiteMaintenanceStore
from helixintel.domain.create_models import AssetCreate, HomeCreate, TemplateCreate
from helixintel.domain.frequency import Frequency
from helixintel.domain.template import AssetCategory, Difficulty


logger = logging.getLogger(__name__)


SYSTEM_TEMPLATES: list[TemplateCreate] = [
    # HVAC
    TemplateCreate(
        name="Change HVAC Filter",
        description="Replace or clean HVAC system air filters to maintain air quality and system efficiency",
        category=AssetCategory.HVAC,
        default_frequency=Frequency.MONTHLY,
        estimated_duration_minutes=10,
        difficulty=Difficulty.EASY,
        instructions=[
            "Turn off the HVAC system",
            "Remove the old filter, noting the airflow direction",
            "Insert the new filter with arrows pointing toward the unit",
            "Turn the system back on",
        ],
    ),
    TemplateCreate(
        name="Service HVAC System",
        description="Annual professional inspection and maintenance of heating and cooling system",
        category=AssetCategory.HVAC,
        default_frequency=Frequency.ANNUAL,
        estimated_duration_minutes=60,
        difficulty=Difficulty.PROFESSIONAL,
        instructions=[
            "Schedule appointment with licensed HVAC technician",
            "Clear area around indoor and outdoor units",
            "Request service report and recommendations",
        ],
    ),
    TemplateCreate(
        name="Clean AC Condenser Coils",
        description="Clean outdoor AC unit coils to maintain cooling efficiency",
        category=AssetCategory.HVAC,
        default_frequency=Frequency.ANNUAL,
        estimated_duration_minutes=30,
        difficulty=Difficulty.MODERATE,
        instructions=[
            "Turn off power to the unit at the breaker",
            "Spray coils with coil cleaner and rinse with a garden hose",
            "Straighten any bent fins with a fin comb",
        ],
    ),
    # Plumbing
    TemplateCreate(
        name="Flush Water Heater",
        description="Drain sediment from water heater tank to maintain efficiency and extend life",
        category=AssetCategory.PLUMBING,
        default_frequency=Frequency.ANNUAL,
        estimated_duration_minutes=45,
        difficulty=Difficulty.MODERATE,
        instructions=[
            "Turn off power or gas supply and the cold water valve",
            "Attach a garden hose to the drain valve and empty the tank",
            "Close the drain valve, refill, then restore power",
        ],
    ),
    TemplateCreate(
        name="Check Washing Machine Hoses",
        description="Inspect washing machine water supply hoses for wear, bulges, or leaks",
        category=AssetCategory.PLUMBING,
        default_frequency=Frequency.ANNUAL,
        estimated_duration_minutes=15,
        difficulty=Difficulty.EASY,
        instructions=[
            "Pull washer away from wall for access",
            "Look for cracks, bulges, or wear at connections",
            "Replace hoses if over 5 years old or showing wear",
        ],
    ),
    TemplateCreate(
        name="Run Water in Unused Drains",
        description="Run water in rarely-used drains to maintain trap seals and prevent sewer gas",
        category=AssetCategory.PLUMBING,
        default_frequency=Frequency.MONTHLY,
        estimated_duration_minutes=5,
        difficulty=Difficulty.EASY,
        instructions=[
            "Run water for 30 seconds in each rarely-used sink",
            "Flush unused toilets",
            "Pour a gallon of water in floor drains",
        ],
    ),
    TemplateCreate(
        name="Test Sump Pump",
        description="Test sump pump operation to ensure it will work when needed",
        category=AssetCategory.PLUMBING,
        default_frequency=Frequency.QUARTERLY,
        estimated_duration_minutes=15,
        difficulty=Difficulty.EASY,
        instructions=[
            "Remove sump pump cover and check for debris",
            "Pour water slowly until the float triggers the pump",
            "Check the discharge pipe outside for flow",
        ],
    ),
    # Appliances
    TemplateCreate(
        name="Clean Refrigerator Coils",
        description="Clean dust and debris from refrigerator coils to maintain cooling efficiency",
        category=AssetCategory.APPLIANCE,
        default_frequency=Frequency.SEMIANNUAL,
        estimated_duration_minutes=30,
        difficulty=Difficulty.MODERATE,
        instructions=[
            "Unplug the refrigerator",
            "Use a coil brush or vacuum to remove dust",
            "Restore power",
        ],
    ),
    TemplateCreate(
        name="Clean Range Hood Filter",
        description="Clean or replace range hood grease filter to maintain ventilation",
        category=AssetCategory.APPLIANCE,
        default_frequency=Frequency.MONTHLY,
        estimated_duration_minutes=20,
        difficulty=Difficulty.EASY,
        instructions=[
            "Remove filters from the hood",
            "Soak metal filters in hot soapy water with degreaser",
            "Replace charcoal filters, which cannot be cleaned",
        ],
    ),
    TemplateCreate(
        name="Clean Garbage Disposal",
        description="Clean and deodorize garbage disposal to prevent odors and maintain operation",
        category=AssetCategory.APPLIANCE,
        default_frequency=Frequency.MONTHLY,
        estimated_duration_minutes=10,
        difficulty=Difficulty.EASY,
        instructions=[
            "Pour 1/2 cup baking soda followed by 1 cup white vinegar",
            "Flush with hot water while running the disposal",
        ],
    ),
    TemplateCreate(
        name="Clean Dryer Vent",
        description="Clean lint from dryer vent system to prevent fires and improve efficiency",
        category=AssetCategory.APPLIANCE,
        default_frequency=Frequency.QUARTERLY,
        estimated_duration_minutes=30,
        difficulty=Difficulty.MODERATE,
        instructions=[
            "Unplug the dryer and disconnect the vent hose",
            "Clean the hose and exterior vent with a vent brush",
            "Reconnect securely and run an empty cycle",
        ],
    ),
    # Safety
    TemplateCreate(
        name="Test Smoke Detectors",
        description="Test all smoke detectors and replace batteries as needed",
        category=AssetCategory.ELECTRICAL,
        default_frequency=Frequency.MONTHLY,
        estimated_duration_minutes=15,
        difficulty=Difficulty.EASY,
        instructions=[
            "Press the test button on each detector",
            "Replace batteries in any weak-sounding units",
            "Record the test date",
        ],
    ),
    TemplateCreate(
        name="Test GFCI Outlets",
        description="Test ground fault circuit interrupter outlets for proper operation",
        category=AssetCategory.ELECTRICAL,
        default_frequency=Frequency.MONTHLY,
        estimated_duration_minutes=10,
        difficulty=Difficulty.EASY,
        instructions=[
            "Press TEST: the plugged-in device should turn off",
            "Press RESET: the device should turn on",
            "Replace any outlet that fails",
        ],
    ),
    TemplateCreate(
        name="Inspect Fire Extinguisher",
        description="Check fire extinguisher pressure and accessibility",
        category=AssetCategory.ELECTRICAL,
        default_frequency=Frequency.ANNUAL,
        estimated_duration_minutes=5,
        difficulty=Difficulty.EASY,
        instructions=[
            "Check the pressure gauge is in the green zone",
            "Verify pin and tamper seal are intact",
            "Note the expiration or service date",
        ],
    ),
    # Outdoor
    TemplateCreate(
        name="Clean Gutters",
        description="Remove leaves and debris from gutters and downspouts",
        category=AssetCategory.OUTDOOR,
        default_frequency=Frequency.SEMIANNUAL,
        estimated_duration_minutes=120,
        difficulty=Difficulty.MODERATE,
        instructions=[
            "Set up the ladder on level ground",
            "Remove debris working toward the downspout",
            "Flush gutters and downspouts with a hose",
        ],
    ),
    TemplateCreate(
        name="Check Roof and Attic",
        description="Visual inspection of roof condition and attic for issues",
        category=AssetCategory.OUTDOOR,
        default_frequency=Frequency.SEMIANNUAL,
        estimated_duration_minutes=60,
        difficulty=Difficulty.MODERATE,
        instructions=[
            "From the ground, check for missing or damaged shingles",
            "In the attic, look for water stains or wet spots",
            "Document any issues with photos",
        ],
    ),
    TemplateCreate(
        name="Winterize Outdoor Faucets",
        description="Prepare outdoor water faucets for freezing temperatures",
        category=AssetCategory.OUTDOOR,
        default_frequency=Frequency.ANNUAL,
        estimated_duration_minutes=30,
        difficulty=Difficulty.EASY,
        instructions=[
            "Turn off the indoor shutoff valves for outdoor faucets",
            "Open outdoor faucets to drain and leave them open",
            "Store hoses indoors and fit faucet covers",
        ],
    ),
    TemplateCreate(
        name="Clean Chimney",
        description="Professional chimney cleaning and inspection for safe operation",
        category=AssetCategory.OUTDOOR,
        default_frequency=Frequency.ANNUAL,
        estimated_duration_minutes=120,
        difficulty=Difficulty.PROFESSIONAL,
        instructions=[
            "Schedule a certified chimney sweep",
            "Clear the area around the fireplace",
            "Request a written inspection report",
        ],
    ),
    TemplateCreate(
        name="Seal Deck/Fence",
        description="Apply sealant or stain to protect wood deck and fence from weather",
        category=AssetCategory.OUTDOOR,
        default_frequency=Frequency.ANNUAL,
        estimated_duration_minutes=240,
        difficulty=Difficulty.MODERATE,
        instructions=[
            "Pick a stretch of 2-3 dry days",
            "Clean the wood and let it dry completely",
            "Apply sealant or stain in sections",
        ],
    ),
    TemplateCreate(
        name="Clean Window Wells",
        description="Remove debris from window wells to prevent water damage and improve emergency egress",
        category=AssetCategory.OUTDOOR,
        default_frequency=Frequency.SEMIANNUAL,
        estimated_duration_minutes=45,
        difficulty=Difficulty.EASY,
        instructions=[
            "Remove leaves, debris, and trash",
            "Check and clear the drain at the bottom",
            "Check the well liner for damage",
        ],
    ),
]


async def seed(*, db_path: str, demo_home: str | None = None) -> int:
    """Load missing system templates (matched by name) and optionally a demo home.

    Returns:
        Number of templates created
    """
    store = SQLiteMaintenanceStore(db_path=db_path)
    await store.open()
    try:
        existing = {template.name for template in await store.list_templates(include_inactive=True)}
        created = 0
        for template in SYSTEM_TEMPLATES:
            if template.name in existing:
                continue
            await store.create_template(template)
            created += 1
        logger.info("Seeded %d maintenance templates (%d already present)", created, len(existing))

        if demo_home:
            home = await store.create_home(HomeCreate(name=demo_home))
            await store.create_asset(AssetCreate(home_id=home.id, name="Furnace", category=AssetCategory.HVAC))
            await store.create_asset(AssetCreate(home_id=home.id, name="Water Heater", category=AssetCategory.PLUMBING))
            logger.info("Created demo home %s (%s)", demo_home, home.id)
        return created
    finally:
        await store.close()


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed HelixIntel system maintenance templates")
    parser.add_argument("--db", default=settings.sqlite_db_path, help="SQLite database path")
    parser.add_argument("--demo-home", default=None, help="Also create a demo home with this name")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    asyncio.run(seed(db_path=args.db, demo_home=args.demo_home))


if __name__ == "__main__":
    main()
