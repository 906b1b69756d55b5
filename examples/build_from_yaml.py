"""
Run a clone-and-templatize build described by a YAML file

    python build_from_yaml.py build.yaml
"""

import sys
import logging
from vsbuild import establish, load_config, VSBuildError

logging.basicConfig(level=logging.INFO)


def main(path):
    config = load_config(path)

    with establish(config.connection) as driver:
        vm = driver.clone(config.clone)
        try:
            driver.reconfigure(vm, config.hardware)
            driver.power_on(vm)
            print(f"VM {vm.name} got IP {driver.wait_for_ip(vm)}")
            driver.start_shutdown(vm)
            driver.wait_for_shutdown(vm, config.shutdown_timeout)
        except VSBuildError:
            # Build failed midway; discard the half-built VM
            driver.power_off(vm)
            driver.destroy(vm)
            raise

        if config.create_snapshot:
            driver.create_snapshot(vm)
        if config.convert_to_template:
            driver.convert_to_template(vm)


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(2)
    try:
        main(sys.argv[1])
    except VSBuildError as e:
        print(f"Build failed: {e}")
        sys.exit(1)
