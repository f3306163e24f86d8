from setuptools import setup, find_packages
setup(
    name = "crategraph",
    version = "0.1.0.dev1",
    description = "Serializable codec for crate dependency graphs",
    author = "Various Developers",
    packages = find_packages(exclude=['tests', 'tests.*']),
    install_requires = [
        'attrs>=21.3',
        ],
    extras_require = {
        'test': ['pytest'],
        },
    python_requires='>=3.7',
    )
