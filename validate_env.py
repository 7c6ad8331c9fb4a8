import asyncio
import sys
import os

# Add the current directory to sys.path
sys.path.append(os.getcwd())

from app.core.config import settings
from app.services.env_check import run_checks


async def main() -> int:
    print("Checking environment...")
    print(f"PORT: {settings.PORT}")

    report = await run_checks(settings)

    for line in report.passed:
        print(f"  {line}")

    print("\n" + "=" * 60)
    print("VALIDATION SUMMARY")
    print("=" * 60)

    if report.warnings:
        print("\nWARNINGS:")
        for warning in report.warnings:
            print(f"  {warning}")

    if not report.ok:
        print("\nERRORS:")
        for error in report.errors:
            print(f"  {error}")
        print("\nREQUIRED ACTIONS:")
        print("1. Create a .env file from .env.example")
        print("2. Set your OpenWeatherMap API key (https://openweathermap.org/api)")
        print("3. Make sure Redis is running (docker-compose up redis -d)")
        print("\nThe server cannot start with these errors.")
        return 1

    print("\nAll checks passed. The server can start safely.")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
