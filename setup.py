from setuptools import setup, find_packages

setup(
    name='axsnap',
    version='0.1.0',
    license="Apache 2.0",
    description="axsnap: accessibility snapshots with stable element refs for browser agents",
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        'playwright>=1.40',
        'pydantic>=2.0',
        'click>=8.0',
        'PyYAML>=6.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.0',
            'pytest-asyncio>=0.21',
        ],
    },
    entry_points={
        'console_scripts': [
            'axsnap=axsnap.cli:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: OS Independent",
    ],
    python_requires='>=3.9',
)
