from setuptools import find_packages, setup

setup(
    name='DjangoInelasticMappings',
    version='1.0.0',
    description='Deploys and verifies Elasticsearch index mappings from Django.',
    long_description=open('README.rst').read(),
    license='MIT',
    packages=find_packages(),
    install_requires=[
        # 7.14+ refuses the pre-6.0 servers the typed catalog is deployed to
        'elasticsearch>=7.0,<7.14',
        'elasticsearch-dsl~=7.0',
        'python-dateutil~=2.8',
        'django>=3.2,<6.0'
    ],
    extras_require={
        'test': [
            'pytest',
        ]
    },
    classifiers=[
        'Development Status :: 5 - Production/Stable',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Topic :: Database',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
    ]
)
