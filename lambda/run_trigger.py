"""
AWS Lambda function to trigger a KOSIS extraction run on the deployed service.

Deploy this to Lambda and schedule with EventBridge for periodic extractions.
"""

import json
import os
import urllib.error
import urllib.request
from typing import Any, Dict


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Queue a background extraction via the API.

    Environment Variables:
        API_URL: The service URL (e.g., https://xxx.awsapprunner.com)
        RUN_TIMEOUT: Request timeout in seconds (default: 30)

    The EventBridge event may carry an ``input`` object (searchKeyword,
    maxItems, ...) which is forwarded as the run input.

    EventBridge Rule Example:
        Schedule: cron(0 18 * * ? *)  # Daily at 03:00 KST
    """
    api_url = os.environ.get("API_URL")
    if not api_url:
        return {"statusCode": 500, "body": json.dumps({"error": "API_URL environment variable not set"})}

    timeout = int(os.environ.get("RUN_TIMEOUT", "30"))
    run_input = (event or {}).get("input") or {}

    endpoint = f"{api_url.rstrip('/')}/runs/background"
    request = urllib.request.Request(
        endpoint,
        data=json.dumps(run_input).encode("utf-8"),
        method="POST",
        headers={"Content-Type": "application/json", "User-Agent": "KosisRunTrigger/1.0"},
    )

    try:
        print(f"Triggering extraction at: {endpoint}")

        with urllib.request.urlopen(request, timeout=timeout) as response:
            result = json.loads(response.read().decode("utf-8"))

            print(f"Extraction queued: {json.dumps(result, indent=2)}")

            return {"statusCode": 200, "body": json.dumps({"success": True, "run": result})}

    except urllib.error.HTTPError as e:
        error_body = e.read().decode("utf-8") if e.fp else str(e)
        print(f"Extraction request failed with HTTP {e.code}: {error_body}")

        return {"statusCode": e.code, "body": json.dumps({"success": False, "error": f"HTTP {e.code}: {error_body}"})}

    except urllib.error.URLError as e:
        print(f"Extraction request failed: {str(e)}")

        return {"statusCode": 500, "body": json.dumps({"success": False, "error": f"Connection error: {str(e)}"})}


# For local testing
if __name__ == "__main__":
    import sys

    if len(sys.argv) > 1:
        os.environ["API_URL"] = sys.argv[1]

    result = lambda_handler({}, None)
    print(json.dumps(result, indent=2))
