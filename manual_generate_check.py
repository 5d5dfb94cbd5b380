import json
import sys

import requests # type: ignore

from mockgen import config

GENERATE_URL = f"{config.SERVICE_URL}/mocks/generate"
PARSE_URL = f"{config.SERVICE_URL}/parse"

FILE_PATH = sys.argv[1] if len(sys.argv) > 1 else "examples/NetworkService.swift"  # adjust this


def main():
    # 0) Read code
    with open(FILE_PATH, "r", encoding="utf-8") as f:
        code = f.read()

    filename = FILE_PATH.replace("\\", "/").split("/")[-1]

    # 1) Code -> Element graph
    parse_resp = requests.post(PARSE_URL, json={"code": code, "filename": filename})
    parse_resp.raise_for_status()
    cir = parse_resp.json()["cir"]
    print("=== Elements ===")
    print("nodes:", len(cir["nodes"]), "edges:", len(cir["edges"]))

    # 2) Code -> mocks
    gen_resp = requests.post(GENERATE_URL, json={"code": code, "filename": filename})
    gen_resp.raise_for_status()
    data = gen_resp.json()

    for mock in data["mocks"]:
        print(f"\n=== {mock['file_name']} ===")
        print(mock["source"])

        with open(mock["file_name"], "w", encoding="utf-8") as f:
            f.write(mock["source"])
        print(f"Saved mock to {mock['file_name']}")

    if data["errors"]:
        print("\n=== Errors ===")
        print(json.dumps(data["errors"], indent=2))


if __name__ == "__main__":
    main()
