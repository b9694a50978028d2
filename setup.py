from setuptools import setup, find_packages

setup(
    name='realty-manager',
    version='0.1.0',
    packages=find_packages(exclude=['tests', 'tests.*']),
    package_data={
        'realty': ['sql/*.sql'],
    },
    python_requires='>=3.9',
    install_requires=[
        'click>=8.1.0',
        'psycopg2-binary>=2.9.0',
        'python-dotenv>=1.0.0',
        'rich>=13.0.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.0.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'realty=realty.cli:cli',
        ],
    },
)
