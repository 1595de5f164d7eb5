import logging
import os

import networkx as nx

from pyfogplace.application import Application, AppModule, AppEdge, AppLoop, EdgeKind, Sensor, Actuator
from pyfogplace.core import Optimizer
from pyfogplace.distribution import DeterministicDistribution
from pyfogplace.resource import Cloud, Fog, Client, Link4G, LinkCable

logging.basicConfig(format="%(name)s - %(levelname)s - %(message)s", level=logging.INFO)


def _app(name: str, mobile) -> Application:
    client = AppModule(f"{name}:client", ram=10, storage=10, client_node=mobile, selectivity={
        f"{name}:EEG": [(f"{name}:_SENSOR", 0.9)],
        f"{name}:CONCENTRATION": [(f"{name}:SELF_STATE_UPDATE", 1.0)],
        f"{name}:GLOBAL_GAME_STATE": [(f"{name}:GLOBAL_STATE_UPDATE", 1.0)],
    })
    calculator = AppModule(f"{name}:concentration_calculator", ram=100, storage=100, selectivity={
        f"{name}:_SENSOR": [(f"{name}:CONCENTRATION", 1.0)],
    })
    connector = AppModule(f"{name}:connector", ram=100, storage=100, is_global=True)
    edges = [
        AppEdge(f"{name}:eeg", client.name, f"{name}:EEG", cpu_length=30, nw_length=500, kind=EdgeKind.SENSOR),
        AppEdge(client.name, calculator.name, f"{name}:_SENSOR", cpu_length=35, nw_length=500),
        AppEdge(calculator.name, connector.name, f"{name}:PLAYER_GAME_STATE", cpu_length=10, nw_length=1000, periodicity=0.1),
        AppEdge(calculator.name, client.name, f"{name}:CONCENTRATION", cpu_length=14, nw_length=500),
        AppEdge(connector.name, client.name, f"{name}:GLOBAL_GAME_STATE", cpu_length=28, nw_length=1000, periodicity=0.1),
        AppEdge(client.name, f"{name}:display", f"{name}:SELF_STATE_UPDATE", cpu_length=10, nw_length=500, kind=EdgeKind.ACTUATOR),
        AppEdge(client.name, f"{name}:display", f"{name}:GLOBAL_STATE_UPDATE", cpu_length=10, nw_length=500, kind=EdgeKind.ACTUATOR),
    ]
    loop = AppLoop([f"{name}:eeg", client.name, calculator.name, client.name, f"{name}:display"], deadline=0.3)
    return Application(name, modules=[client, calculator, connector], edges=edges, loops=[loop])


def generate_simple_network():
    cloud = Cloud("cloud")
    proxy = Fog("proxy")
    mobile = Client("mobile")
    G = nx.Graph()
    G.add_edge(cloud, proxy, link=LinkCable())
    G.add_edge(proxy, mobile, link=Link4G())
    return G, mobile


def main(out_dir: str):
    network, mobile = generate_simple_network()
    app = _app("vr", mobile)
    sensors = [Sensor("vr:eeg", "vr:EEG", gateway=mobile, distribution=DeterministicDistribution(0.1), application="vr")]
    actuators = [Actuator("vr:display", "DISPLAY", gateway=mobile, application="vr")]

    optimizer = Optimizer(network, [app], sensors, actuators)
    result = optimizer.run(results_path=out_dir, progress_bar=True)
    result.log.print_report(result.iterations, result.elapsed)

    if result.feasible:
        print("\nPlacement:")
        for node, modules in result.placement_map.items():
            print(f"{node}: {', '.join(modules) or '-'}")
        print("\nRouting:")
        for (source, destination), path in result.routing_map.items():
            print(f"{source} -> {destination}: {' -> '.join(path)}")


if __name__ == "__main__":
    experiment_name = "experiment_vr_game"
    os.makedirs(experiment_name, exist_ok=True)
    main(out_dir=experiment_name)
