import logging

from plastic_hash import PlasticHashFactory, PlasticHashConfig, key_hash
from when_policy import OnDemand
from what_policy import Anneal
from rebalance import RebalancePlanner
from fleet_router import FleetRouter

logging.basicConfig(level=logging.INFO, format='%(asctime)s [%(name)s:%(funcName)s] %(levelname)-8s : %(message)s')

factory = PlasticHashFactory()
planner = RebalancePlanner()
ids = [key_hash(f'user-{i}') for i in range(1000)]

# 1) Default Stasis + Snap, growing then shrinking a fleet
ph = factory.create_instance()
ph.add_epochs(5, 7)
before = ph.clone()
ph.add_epoch(4)
plan = planner.plan_moved(ids, before, ph)
print('Shrink 7->4:', ph, planner.stats(plan)['moved_count'], 'moved')

# 2) Config-driven instance
ph = factory.from_config(PlasticHashConfig(when='periodic', when_param=5, what='squeeze', epochs=[5, 7, 4, 2, 2]))
print('From config:', ph)

# 3) On-demand annealing
on_demand = OnDemand()
ph = factory.create_instance(on_demand, Anneal())
ph.add_epochs(5, 7, 4, 2)
before = ph.clone()
on_demand.set_go(True)
ph.add_epoch(2)
print('Annealed:', ph, f'moved fraction {planner.moved_fraction(ids, before, ph):.2%}')

# 4) Routing string keys to named servers
router = FleetRouter(factory.create_instance())
for name in ['srv-a', 'srv-b', 'srv-c']:
    router.attach(name)
print('user-42 ->', router.route('user-42'))
router.attach('srv-d')
print('user-42 ->', router.route('user-42'), 'after adding srv-d')
