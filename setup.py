# setup.py
from setuptools import setup, find_packages

install_requires = [
    # --- MODELS & CONFIG ---
    "pydantic>=2.0.0",
    "pyyaml>=6.0.0",
    "python-dotenv>=1.0.0",

    # --- NETWORK ---
    "httpx>=0.27.0",  # Ledger gateway and crypto service adapters

    # --- CONSOLE ---
    "rich>=13.0.0",

    # --- TESTS---
    "pytest-asyncio==1.3.0",
    "pytest"
]

setup(
    name="codecheck-client",
    version="0.1.0",
    description="CodeCheck confidential record client core",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"codecheck.shared.config": ["settings/*.yaml"]},
    include_package_data=True,
    install_requires=install_requires,
    python_requires=">=3.11",
)
