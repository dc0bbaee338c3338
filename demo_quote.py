#!/usr/bin/env python3
"""
Demo script for the quote pricing engine.
Shows margin, tiers, deposit and recommendations for a few service jobs.
"""

import asyncio
from datetime import date

from stackr.config import get_settings
from stackr.core.logging_config import setup_logging
from stackr.quotes.engine.quote_engine import QuoteEngine
from stackr.quotes.schemas.quote_input_v1 import ServiceRequestV1


async def main():
    """Demo of the quote engine."""
    settings = get_settings()
    setup_logging(settings.log_level, json=False)

    print("🚀 Stackr - Quote Engine Demo")
    print("=" * 50)

    engine = QuoteEngine.from_settings(settings)
    today = date.today()

    scenarios = [
        {
            "name": "Oil change in Austin (competitive market)",
            "payload": {
                "jobType": "Oil Change",
                "serviceIndustry": "automotive",
                "laborHours": 0.5,
                "laborRate": 95,
                "materialCost": 45,
                "location": "Austin, TX",
                "experienceYears": 5,
                "complexity": "low",
                "competitionLevel": "high",
                "customerName": "Jane Doe",
            },
        },
        {
            "name": "Bathroom remodel in Boston (urgent)",
            "payload": {
                "jobType": "Bathroom Remodel",
                "laborHours": 60,
                "laborRate": 70,
                "materialCost": 4200,
                "location": "Boston, MA",
                "experienceYears": 12,
                "complexity": "high",
                "isUrgent": True,
            },
        },
        {
            "name": "Lawn mowing, new business, no location",
            "payload": {
                "jobType": "Lawn Mowing",
                "laborHours": 2,
                "laborRate": 40,
                "experienceYears": 1,
            },
        },
        {
            "name": "Unknown trade (default bucket)",
            "payload": {
                "jobType": "Piano Tuning",
                "laborHours": "abc",
                "materialCost": 20,
                "location": "somewhere",
            },
        },
    ]

    for i, scenario in enumerate(scenarios, 1):
        print(f"\n📋 Scenario {i}: {scenario['name']}")
        print("-" * 40)

        try:
            request = ServiceRequestV1.model_validate(scenario["payload"]).to_request()
            q = await engine.generate_quote(request, today=today)
        except Exception as e:
            print(f"❌ Error: {e}")
            continue

        print("Input:")
        print(f"  • Job: {q.job_type} ({q.service_industry})")
        print(f"  • Region: {q.region}, season: {q.season.value}")

        print("\nOutput:")
        print(f"  • Cost base: {q.currency} {q.subtotal:.2f}")
        print(f"  • Margin: {q.profit_margin * 100:.1f}% (raw {q.margin_factors.raw_margin * 100:.2f}%)")
        print(f"  • Total: {q.currency} {q.total:.0f}")
        print(
            f"  • Regional average: {q.regional_average * 100:.1f}% -> "
            f"{q.competitive_position.position.value} ({q.competitive_position.percent_diff}%)"
        )
        if q.deposit.required:
            print(
                f"  • Deposit: {q.deposit.percent}% = {q.deposit.amount:.0f}, "
                f"balance {q.deposit.balance_due:.0f}"
            )
        else:
            print("  • Deposit: not required")

        print("\nTiers:")
        for t in q.tiers:
            star = " ⭐" if t.recommended else ""
            print(f"  {t.name:<9} {t.price:>8.0f}  profit {t.profit:>8.2f}{star}")

        print("\nRecommendations:")
        for j, r in enumerate(q.recommendations, 1):
            print(f"  {j}. [{r.priority.value}] {r.title}")

    print("\n" + "=" * 50)
    print("✅ Demo complete!")
    print(f"\nTables: {settings.tables_dir}\nRules: {settings.ruleset_path}")


if __name__ == "__main__":
    asyncio.run(main())
