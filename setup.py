from setuptools import setup, find_packages

setup(
    name="field-validation",
    version="0.1.0",
    description="Field-level validation rules with ordered check pipelines and per-country registries",
    author="Jude Payne",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={
        'field_validation': [
            'validation-config.yaml',
            'config.schema.json',
            'data/postal_codes.csv',
        ],
    },
    include_package_data=True,
    install_requires=[
        'pyyaml>=6.0',
        'jsonschema>=4.17.0',
        'requests>=2.28.0',
        'phonenumbers>=8.13.0',
        'disposable-email-domains',
    ],
    extras_require={
        'test': ['pytest>=7.0'],
    },
    python_requires='>=3.9',
)
