from setuptools import setup, find_packages

setup(
    name="platformq-kyc-whitelist",
    version="1.0.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        "pyignite>=0.5.2",
        "base58>=2.1.0",
        "cryptography>=41.0.0",
        "click>=8.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "kyc-whitelist = platformq_kyc_whitelist.cli:cli",
        ],
    },
    python_requires=">=3.8",
    author="PlatformQ Team",
    description="KYC whitelist registry for PlatformQ services",
)
