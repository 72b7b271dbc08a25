"""
XOR Problem Implementation for nichevo

This module trains a supercluster on the classic XOR (exclusive OR) problem.
XOR is not linearly separable, so the networks need their hidden layer to solve it.

The XOR Problem:
    Input (0, 0) → Output 0
    Input (0, 1) → Output 1
    Input (1, 0) → Output 1
    Input (1, 1) → Output 0

Networks have two softmax outputs, read as the probabilities of the classes 0 and 1.

Fitness Function:
    Fitness = Σ probability assigned to the correct class

    Maximum fitness of 4.0 is achieved when all four cases are classified with
    certainty. The configuration stops the run once the strongest network
    reaches 3.6.

Usage:
    python examples/trial_XOR.py [--jobs N] [--seed S]
"""

import argparse
import logging
from pathlib import Path

from nichevo            import Config, EvaluationMode, Network
from nichevo.run        import Trainer


class TrainerXOR(Trainer):
    """
    Trainer for the XOR problem.

    Implemented Methods:
        _evaluate_fitness(network): Score a network on the 4 XOR cases
        _evaluate_testing_fitness(network): Score a network on slightly noisy XOR cases
        _report_progress():         Log generation statistics every 10 generations
        _final_report():            Log the truth table of the strongest network
    """

    xor_inputs  = [[0.0, 0.0], [0.0, 1.0], [1.0, 0.0], [1.0, 1.0]]
    xor_outputs = [0, 1, 1, 0]

    noisy_inputs = [[0.1, 0.05], [0.05, 0.9], [0.95, 0.1], [0.9, 0.95]]

    def _evaluate_fitness(self, network: Network) -> float:
        fitness = 0.0
        for inputs, expected in zip(self.xor_inputs, self.xor_outputs):
            network.set_inputs(inputs)
            fitness += network.query()[expected]
        return fitness

    def _evaluate_testing_fitness(self, network: Network) -> float:
        fitness = 0.0
        for inputs, expected in zip(self.noisy_inputs, self.xor_outputs):
            network.set_inputs(inputs)
            fitness += network.query()[expected]
        return fitness

    def _report_progress(self):
        if self.generation % 10 == 0:
            super()._report_progress()

    def _final_report(self):
        super()._final_report()

        strongest = self.supercluster.get_strongest_network()
        if strongest is None:
            return

        s  = "input         P(0)     P(1)    target\n"
        s += "--------------------------------------\n"
        for inputs, expected in zip(self.xor_inputs, self.xor_outputs):
            strongest.set_inputs(inputs)
            p0, p1 = strongest.query()
            s += f"{inputs} -> {p0:.4f}   {p1:.4f}   {expected}\n"
        logging.getLogger(__name__).info("truth table of the strongest network:\n%s", s)


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description="Evolve networks solving XOR")
    parser.add_argument('--jobs', type=int, default=1, help="parallel processes for fitness evaluation")
    parser.add_argument('--seed', type=int, default=None, help="random seed")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(message)s")

    config  = Config(str(Path(__file__).parent / "configs" / "config_xor.ini"))
    trainer = TrainerXOR(config, seed=args.seed)
    trainer.run(num_jobs=args.jobs)

    score = trainer.evaluate(EvaluationMode.TESTING, include_archived=True, num_jobs=args.jobs)
    logging.getLogger(__name__).info("best score on noisy inputs = %.4f (max 4.0)", score)
