"""
Example client that sends a local image to the compression API.
Usage: python client_example.py [image_path] [endpoint]
"""
import requests
import json
import base64
import mimetypes
import os
import sys
from pathlib import Path

# Configuration
BASE_URL = os.getenv("API_URL", "http://localhost:3000")
IMAGE_PATH = "test_images/sample.jpg"  # Update to any .jpg, .png or .webp

OPTIONS = {
    "quality": 80,
    "format": "jpeg",
}


def image_to_data_uri(image_path: str) -> str:
    """Reads an image file and wraps it in a base64 data URI."""
    mime_type = mimetypes.guess_type(image_path)[0] or "image/jpeg"
    with open(image_path, "rb") as img_file:
        encoded = base64.b64encode(img_file.read()).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def compress_file(image_path: str, endpoint: str = "/api/compress", output_dir: str = "compressed"):
    """
    Send an image to a compression endpoint and save the result.

    Args:
        image_path: Path to the image file
        endpoint: One of /api/compress, /api/compress-landscape, /api/compress-ultra
        output_dir: Directory where the compressed image is written

    Returns:
        Path of the compressed file if successful, None otherwise
    """
    print("=" * 60)
    print(f"Compressing with {endpoint}")
    print("=" * 60)

    if not os.path.exists(image_path):
        print(f"❌ Error: Image not found at {image_path}")
        return None

    file_size = os.path.getsize(image_path)
    print(f"\n📁 Image Info:")
    print(f"   Path: {image_path}")
    print(f"   Size: {file_size:,} bytes ({file_size / 1024:.2f} KB)")

    payload = dict(OPTIONS, imageBase64=image_to_data_uri(image_path))

    try:
        print(f"\n⏳ Processing...")
        response = requests.post(f"{BASE_URL}{endpoint}", json=payload, timeout=60)

        print(f"\n📥 Response:")
        print(f"   Status Code: {response.status_code}")

        if response.status_code != 200:
            print(f"   ❌ Error!")
            try:
                print(json.dumps(response.json(), indent=2))
            except ValueError:
                print(f"\n   Response Text: {response.text}")
            return None

        result = response.json()
        print(f"   ✅ Success!")
        print(f"\n📋 Result:")
        print(f"   Size: {result['originalSize']:,} → {result['compressedSize']:,} bytes ({result['reduction']})")
        print(f"   Dimensions: {result['originalDimensions']} → {result['newDimensions']}")
        print(f"   Quality: {result['quality']} → {result['finalQuality']}")
        print(f"   Type: {result['compressionType']}, escalated: {result['escalated']}")

        # Save the compressed image next to the other outputs
        header, encoded = result["compressedImage"].split(",", 1)
        extension = mimetypes.guess_extension(result["mimeType"]) or f".{result['format']}"
        os.makedirs(output_dir, exist_ok=True)
        output_path = Path(output_dir) / f"{Path(image_path).stem}{extension}"
        output_path.write_bytes(base64.b64decode(encoded))
        print(f"\n💾 Saved to: {output_path}")

        return output_path

    except requests.exceptions.ConnectionError:
        print(f"\n❌ Connection Error!")
        print(f"   Make sure the Flask server is running:")
        print(f"   cd backend && python -m image_compressor.main")
        return None

    except requests.exceptions.Timeout:
        print(f"\n❌ Request Timeout!")
        print(f"   The server took too long to respond (> 60s)")
        return None


def check_server():
    """Check if the Flask server is running."""
    try:
        response = requests.get(f"{BASE_URL}/api/health", timeout=5)
    except requests.exceptions.RequestException:
        print("❌ Server is not running")
        print("\nTo start the server:")
        print("  cd backend")
        print("  python -m image_compressor.main")
        return False

    if response.status_code == 200:
        print("✅ Server is running and healthy")
        return True
    print(f"⚠️  Server responded with status {response.status_code}")
    return False


if __name__ == "__main__":
    image_path = sys.argv[1] if len(sys.argv) > 1 else IMAGE_PATH
    endpoint = sys.argv[2] if len(sys.argv) > 2 else "/api/compress"

    if not check_server():
        print("\nPlease start the server first, then run this script again.")
        sys.exit(1)

    print()
    compress_file(image_path, endpoint)
