from setuptools import setup, find_packages

setup(
    name="bookmark_store",
    version="0.1.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "python-dotenv>=1.0.0",
        "aiofiles>=23.2.0",
        "pydantic>=2.5.0",
        "typing_extensions>=4.5.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
        ],
    },
    author="Your Name",
    author_email="your.email@example.com",
    description="Хранилище закладок и папок с корзиной, фильтрами и ручной сортировкой",
    long_description=open("README.md", encoding="utf-8").read(),
    long_description_content_type="text/markdown",
    url="https://github.com/yourusername/bookmark_store",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.9",
    entry_points={
        "console_scripts": [
            "bookmark-store=bookmark_store.main:main",
        ],
    },
)
