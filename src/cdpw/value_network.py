"""Value/cost network: predicts return and cost-to-go from state features.

V_phi(s) ~ E[sum_t gamma^t r_t | s]
C_phi(s) ~ E[sum_t gamma^t c_t | s]   (one output per constraint)
"""

from typing import Any, Callable, Tuple

import numpy as np
import torch
import torch.nn as nn


class ValueCostNetwork(nn.Module):
    """MLP with a scalar value head and a cost head.

    Architecture:
    - Shared MLP trunk over state features
    - Value head: scalar return estimate
    - Cost head: cost-to-go per constraint, kept non-negative by softplus
    """

    def __init__(
        self,
        state_dim: int,
        n_costs: int,
        hidden_dim: int = 64,
        num_layers: int = 2
    ):
        """Initialize value/cost network.

        Args:
            state_dim: Dimension of the state feature vector
            n_costs: Number of constraint dimensions
            hidden_dim: Width of the hidden layers
            num_layers: Number of hidden layers in the trunk
        """
        super().__init__()
        layers = []
        in_dim = state_dim
        for _ in range(num_layers):
            layers.append(nn.Linear(in_dim, hidden_dim))
            layers.append(nn.ReLU())
            in_dim = hidden_dim
        self.trunk = nn.Sequential(*layers)
        self.value_head = nn.Linear(in_dim, 1)
        self.cost_head = nn.Sequential(
            nn.Linear(in_dim, n_costs),
            nn.Softplus()
        )
        self.n_costs = n_costs

    def forward(self, x: torch.Tensor) -> Tuple[torch.Tensor, torch.Tensor]:
        """Forward pass.

        Args:
            x: State features [B, state_dim]

        Returns:
            value [B], cost [B, n_costs]
        """
        h = self.trunk(x)
        return self.value_head(h).squeeze(-1), self.cost_head(h)


class ValueNetworkEstimator:
    """Leaf estimator backed by a ValueCostNetwork.

    Args:
        network: Trained network
        featurize: Maps a state label to a 1-d feature array
        device: Torch device for inference
    """

    def __init__(
        self,
        network: ValueCostNetwork,
        featurize: Callable[[Any], Any],
        device: str = "cpu"
    ):
        self.network = network.to(device)
        self.network.eval()
        self.featurize = featurize
        self.device = device

    def estimate(self, model, state: Any, depth: int) -> Tuple[float, np.ndarray]:
        features = torch.as_tensor(
            np.asarray(self.featurize(state), dtype=np.float32),
            device=self.device
        ).unsqueeze(0)
        with torch.no_grad():
            value, cost = self.network(features)
        return float(value.item()), cost.squeeze(0).cpu().numpy().astype(float)
