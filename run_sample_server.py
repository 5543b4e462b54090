#!/usr/bin/env python3
"""
Run the recognize.im sample server in development mode

Loads credentials from .env, enables debug logging and serves the sample
pages on SERVER_HOST:SERVER_PORT (127.0.0.1:8888 by default).

Setup:
1. Copy your credentials from http://www.recognize.im/user/profile into .env
   (RECOGNIZE_CLIENT_ID, RECOGNIZE_API_KEY, RECOGNIZE_CLAPI_KEY)
2. Run this script
3. Open http://127.0.0.1:8888/ in a browser
"""

import os
import sys
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
env_path = Path('.env')
if env_path.exists():
    load_dotenv(env_path)

from recognizeim.main import SampleServerApplication


def main():
    """Run application using development configuration"""
    host = os.getenv('SERVER_HOST', '127.0.0.1')
    port = os.getenv('SERVER_PORT', '8888')

    print("recognize.im Sample Server - Development Mode")
    print("=" * 50)
    print(f"API host: {os.getenv('RECOGNIZE_API_HOST', 'clapi.itraff.pl')}")
    print(f"Client ID: {os.getenv('RECOGNIZE_CLIENT_ID', 'NOT SET')}")
    print(f"Open http://{host}:{port}/ in a browser")
    print("Press Ctrl+C to stop")
    print("-" * 50)

    os.environ['DEBUG'] = 'true'
    os.environ['LOG_LEVEL'] = 'DEBUG'

    app = SampleServerApplication()
    return app.run(debug=True)


if __name__ == "__main__":
    sys.exit(main())
