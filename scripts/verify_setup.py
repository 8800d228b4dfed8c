#!/usr/bin/env python3
"""
Simple script to verify the package imports and the MongoDB connection.
"""

import asyncio
import sys
from motor.motor_asyncio import AsyncIOMotorClient


async def check_mongodb_connection():
    """Check MongoDB connection and the reporting collections."""
    try:
        from vendor_compliance.config import settings
        client = AsyncIOMotorClient(settings.mongodb_url, serverSelectionTimeoutMS=10000)
        await client.admin.command('ping')
        print("✅ MongoDB connection successful!")

        database = client[settings.database_name]
        for name in (settings.users_collection, settings.documents_collection, settings.submissions_collection):
            count = await database[name].estimated_document_count()
            print(f"   📊 {name}: {count} records")
        client.close()
        return True
    except Exception as e:
        print(f"❌ MongoDB connection failed: {e}")
        print("   Make sure MONGODB_URL and DATABASE_NAME point at the portal database")
        return False


def check_imports():
    """Check if all required modules can be imported."""
    try:
        import fastapi
        import uvicorn
        import motor
        import pydantic
        import jose
        from vendor_compliance.main import app
        print("✅ All required packages imported successfully!")
        return True
    except ImportError as e:
        print(f"❌ Import failed: {e}")
        return False


async def main():
    """Run all checks."""
    print("Checking Vendor Compliance Reporting setup...\n")

    imports_ok = check_imports()
    mongo_ok = await check_mongodb_connection()

    print("\n" + "="*50)
    if imports_ok and mongo_ok:
        print("✅ All checks passed! You can start the server with:")
        print("   uvicorn vendor_compliance.main:app --reload --host 0.0.0.0 --port 8000")
    else:
        print("❌ Some checks failed. Please check the errors above.")
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
