import setuptools

with open("README.rst", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    name="flatnotes",
    version="0.1.0",
    author="Jacob Williams",
    author_email="jacobaw@gmail.com",
    description="Keeps short text notes in a single flat text file.",
    long_description=long_description,
    long_description_content_type="text/x-rst",
    packages=setuptools.find_packages('src'),
    package_dir={'': 'src'},
    entry_points={
        'console_scripts': [
            'flatnotes = flatnotes.cli:main'
        ]
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    install_requires=[
        'terminaltables',
    ],
    extras_require={
        'test': [
            'freezegun',
            'pyfakefs',
            'pytest',
            'pytest-mock',
        ],
    },
    python_requires='>=3.7',
)
