#!/usr/bin/env python3
"""
Startup script for the FlexiTrip backend with OpenRouter integration
"""

import sys

import requests
from dotenv import load_dotenv

load_dotenv()

from common.config import config  # noqa: E402


def check_openrouter():
    """Check that an API key is set and OpenRouter answers"""
    if not config.get_api_key():
        print("❌ OPENROUTER_API_KEY is not set!")
        print("💡 Add it to your .env file:")
        print("   OPENROUTER_API_KEY=sk-or-...")
        return False

    try:
        response = requests.get(f"{config.openrouter_base_url.rstrip('/')}/models", timeout=5)
        if response.status_code == 200:
            available = {m.get("id") for m in response.json().get("data", [])}
            print("✅ OpenRouter is reachable!")
            for model in config.model_chain():
                marker = "📚" if model in available else "⚠️ "
                print(f"{marker} {model}")
            return True
        else:
            print(f"❌ OpenRouter responded with status {response.status_code}")
            return False
    except requests.exceptions.ConnectionError:
        print("❌ OpenRouter is not reachable!")
        print("💡 Check your network connection and FLEXITRIP_OPENROUTER_BASE_URL")
        return False
    except Exception as e:
        print(f"❌ Error checking OpenRouter: {e}")
        return False


def main():
    print("🚀 Starting FlexiTrip Backend...")
    print("=" * 50)

    openrouter_ok = check_openrouter()

    if not openrouter_ok:
        print("\n⚠️  Chat and prompt enhancement will not work without OpenRouter!")
        print("   You can still use quick prompts and reply parsing.")
        print("   Continue anyway? (y/N): ", end="")

        try:
            response = input().lower().strip()
            if response not in ['y', 'yes']:
                print("❌ Exiting. Please set up OpenRouter first.")
                sys.exit(1)
        except KeyboardInterrupt:
            print("\n❌ Exiting.")
            sys.exit(1)

    from app import app

    print("\n" + "=" * 50)
    print("🌐 Starting Flask server...")
    print("📖 API Documentation: http://localhost:8000/health")
    print("🔗 Frontend should connect to: http://localhost:8000")
    print("=" * 50)

    try:
        app.run(host="0.0.0.0", port=8000, debug=True)
    except KeyboardInterrupt:
        print("\n🛑 Server stopped by user.")
    except Exception as e:
        print(f"\n❌ Error starting server: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
