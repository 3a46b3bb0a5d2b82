from setuptools import setup, find_packages

def version():
    with open('src/esq8img/__init__.py') as f:
        return f.read().split("'")[1]

setup(name = 'esq8img',
      python_requires = '>=3.8',
      version = version(),
      description = 'Ensoniq Mirage/SQ-80 floppy disk image conversion',
      install_requires = [
          'crcmod',
          'bitarray>=3'
      ],
      extras_require = {
          'test': ['pytest']
      },
      packages = find_packages('src'),
      package_dir = { '': 'src' },
      entry_points= {
          'console_scripts': ['esq8img=esq8img.cli:main']
      }
)
